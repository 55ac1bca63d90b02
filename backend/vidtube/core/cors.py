"""CORS and reverse-proxy configuration for the HTTP surface."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Configure CORS for API endpoints and trust one proxy hop when enabled.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS``, ``CORS_MAX_AGE`` and
        ``USE_PROXYFIX`` settings are consulted.

    Notes
    -----
    Session cookies require credentialed requests, which browsers refuse with
    a wildcard origin. A blank or ``"*"`` origin list therefore allows any
    origin for bearer-token clients only.
    """
    if app.config.get("USE_PROXYFIX", True):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)  # type: ignore[method-assign]

    raw_origins = app.config.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    wildcard = len(origins) == 0 or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        expose_headers=["X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
