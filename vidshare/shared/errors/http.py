# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException

from vidshare.shared.config import load_config
from vidshare.shared.logging import logger

from .base import AppError


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def error_envelope(status: int, message: str, code: str, errors: list | None = None) -> dict:
    return {
        "success": False,
        "statusCode": status,
        "message": message,
        "errors": errors or [],
        "error": code,
    }


def handle_app_error(error: AppError) -> tuple[Response, HTTPStatus]:
    response = jsonify(error.to_dict())
    return response, error.status


def register_error_handler(
    app: Flask, *, default_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
) -> None:
    config = load_config()
    debug_mode = config.debug_logging

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        logger.warning(
            f"Handled application error {exc.code} ({exc.kind.value}) on "
            f"{request.method} {request.path}"
        )
        return handle_app_error(exc)

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        status = exc.code or int(default_status)
        code = (exc.name or "http_error").lower().replace(" ", "_")
        return jsonify(error_envelope(status, exc.description or exc.name, code)), status

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        user_id = getattr(g, "user_id", None)

        if debug_mode:
            logger.exception(
                f"Unhandled exception: {request.method} {request.path} "
                f"from {_client_ip()}, user={user_id}, "
                f"query={dict(request.args)}, body_size={request.content_length or 0}"
            )
        else:
            logger.opt(exception=exc).error(
                f"Unhandled {type(exc).__name__} on {request.method} {request.path}"
            )

        payload = error_envelope(int(default_status), "Internal Server Error", "internal_error")
        return jsonify(payload), default_status
