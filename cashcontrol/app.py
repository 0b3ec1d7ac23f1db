# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from flask import Flask
from flask_cors import CORS

from cashcontrol.container import Container
from cashcontrol.shared.logging import logger, setup_logging
from cashcontrol.shared.middleware.error_handler import configure_error_handling
from cashcontrol.shared.middleware.request_logger import configure_request_logging


def create_app(container: Container | None = None, *, create_schema: bool = True) -> Flask:
    container = container or Container()
    config = container.config

    setup_logging(config.log_level)
    if create_schema:
        from cashcontrol.infrastructure.db import init_db

        init_db(container.engine)

    app = Flask(__name__)
    app.extensions["cashcontrol.container"] = container
    configure_error_handling(app, debug_mode=config.debug_logging)
    configure_request_logging(app, debug_mode=config.debug_logging)

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}}
    }
    CORS(app, **cors_kwargs)
    app.register_blueprint(container.auth_controller.as_blueprint())

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        return resp

    if not config.telegram.bot_token:
        logger.warning("TELEGRAM_BOT_TOKEN is empty, mini-app logins will be rejected")
    logger.info("Flask app initialized")
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=8080, debug=True)
