# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.exc import SQLAlchemyError

from vidshare.infrastructure.health import check_database
from vidshare.shared.logging import logger


class MiscController:
    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/api/health", view_func=self.health, methods=["GET"])
        bp.add_url_rule("/api/metrics", view_func=self.metrics, methods=["GET"])
        return bp

    def health(self):
        status: dict[str, object] = {"ok": True}
        try:
            check_database()
            status["database"] = "ok"
        except SQLAlchemyError as exc:
            logger.warning(f"health: database check failed ({type(exc).__name__})")
            status["ok"] = False
            status["database"] = "error"
        return jsonify(status), 200 if status["ok"] else 503

    def metrics(self) -> Response:
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
