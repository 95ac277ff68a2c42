# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import importlib
from typing import Any, Protocol, cast

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from vidshare.infrastructure.container import Container
from vidshare.infrastructure.db import init_db
from vidshare.shared.logging import logger, setup_logging
from vidshare.shared.errors import register_error_handler
from vidshare.shared.middleware.request_logger import configure_request_logging


class _CORSCallable(Protocol):
    def __call__(self, app: Flask, **kwargs: Any) -> Any: ...


_flask_cors = importlib.import_module("flask_cors")
CORS = cast(_CORSCallable, _flask_cors.CORS)


def create_app(container: Container | None = None) -> Flask:
    container = container or Container()
    config = container.config

    setup_logging(
        debug_mode=config.debug_logging,
        service_name=config.observability.service_name,
    )
    init_db()

    app = Flask(__name__)
    hops = config.security.trusted_proxy_count
    if hops:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops)  # type: ignore[method-assign]
    app.extensions["vidshare.container"] = container
    register_error_handler(app)
    configure_request_logging(app)

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}}
    }
    if any(o != "*" for o in config.security.allowed_origins):
        cors_kwargs["supports_credentials"] = True
    CORS(app, **cors_kwargs)

    app.register_blueprint(container.misc_controller.as_blueprint())
    app.register_blueprint(container.auth_controller.as_blueprint())

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        resp.headers.setdefault(
            "Permissions-Policy",
            "geolocation=(), microphone=(), camera=(), payment=(), usb=()",
        )
        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return resp

    logger.info(f"Flask app initialized env={config.app_env}")
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
