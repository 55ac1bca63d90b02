"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from vidtube.core.config import BaseConfig, MediaSettings, TokenSettings, get_config
from vidtube.core.logger import configure_logging, init_app as init_logging

SETTINGS_KEY = "vidtube.settings"


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    Token and media settings are frozen into immutable dataclasses here, once,
    and stored under ``app.extensions["vidtube.settings"]``. A missing or
    shared token secret aborts start-up with
    :class:`~vidtube.core.config.ConfigurationError`.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    token_settings = TokenSettings.from_mapping(app.config)
    # flask-jwt-extended verifies access tokens only
    app.config["JWT_SECRET_KEY"] = token_settings.access_secret
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = token_settings.access_expires
    app.config["JWT_ALGORITHM"] = token_settings.algorithm
    app.extensions[SETTINGS_KEY] = {
        "tokens": token_settings,
        "media": MediaSettings.from_mapping(app.config),
    }

    from vidtube.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from vidtube.infra import media

    media.init_app(app, app.extensions[SETTINGS_KEY]["media"])

    from vidtube.core import cors

    cors.init_app(app)

    from vidtube.api import init_app as init_api

    init_api(app)

    from vidtube.core import errors

    errors.init_app(app)

    return app
