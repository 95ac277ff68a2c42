# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""ImageKit media storage adapter."""

from __future__ import annotations

import mimetypes
from pathlib import Path

import httpx

from vidshare.domain.accounts.entities import UploadedMedia
from vidshare.domain.accounts.repositories import MediaStorage
from vidshare.shared.config import MediaConfig
from vidshare.shared.logging import logger


class ImageKitMediaStorage(MediaStorage):
    """Uploads local files to ImageKit and deletes them by file id.

    Failures never raise: ``upload`` returns ``None`` and ``delete`` returns
    ``None``. The local file is removed after every upload attempt.
    """

    def __init__(self, config: MediaConfig, *, client: httpx.Client | None = None) -> None:
        self._config = config
        self._client = client

    def upload(self, local_path: Path) -> UploadedMedia | None:
        path = Path(local_path)
        try:
            if not path.is_file():
                logger.warning(f"media.upload: missing local file path={path}")
                return None

            mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            with path.open("rb") as fh:
                response = self._request(
                    "POST",
                    self._config.upload_url,
                    data={
                        "fileName": path.name,
                        "folder": self._config.folder,
                        "useUniqueFileName": "true",
                    },
                    files={"file": (path.name, fh, mime)},
                )
            if response is None:
                return None
            if response.status_code not in (200, 201):
                logger.warning(
                    f"media.upload: rejected code={response.status_code} body={response.text[:200]}"
                )
                return None

            body = response.json()
            url, file_id = body.get("url"), body.get("fileId")
            if not url or not file_id:
                logger.warning("media.upload: response without url/fileId")
                return None
            logger.info(f"media.upload: ok file_id={file_id}")
            return UploadedMedia(url=url, file_id=file_id)
        except (OSError, ValueError) as exc:
            logger.warning(f"media.upload: failed path={path} error={type(exc).__name__}")
            return None
        finally:
            path.unlink(missing_ok=True)

    def delete(self, file_id: str | None) -> bool | None:
        if not file_id:
            return None
        response = self._request("DELETE", f"{self._config.api_url.rstrip('/')}/files/{file_id}")
        if response is None:
            return None
        if response.status_code not in (200, 204):
            logger.warning(f"media.delete: rejected file_id={file_id} code={response.status_code}")
            return None
        logger.info(f"media.delete: ok file_id={file_id}")
        return True

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response | None:
        auth = (self._config.imagekit_private_key or "", "")
        try:
            if self._client is not None:
                return self._client.request(method, url, auth=auth, **kwargs)
            with httpx.Client(timeout=self._config.timeout) as client:
                return client.request(method, url, auth=auth, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning(f"media: {method} {url} failed ({type(exc).__name__})")
            return None


__all__ = ["ImageKitMediaStorage"]
