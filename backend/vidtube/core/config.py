"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Loads .env in development (no-op when missing)
load_dotenv()

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_duration(value: str | int | timedelta) -> timedelta:
    """Convert ``"15m"``, ``"10d"``, ``"3600"`` or a number of seconds to a timedelta.

    Parameters
    ----------
    value: str | int | timedelta
        Raw duration as found in the environment or config mapping.

    Returns
    -------
    timedelta
        Strictly positive duration.

    Raises
    ------
    ValueError
        If the value cannot be parsed or is not positive.
    """
    if isinstance(value, timedelta):
        delta = value
    elif isinstance(value, int):
        delta = timedelta(seconds=value)
    else:
        match = _DURATION_RE.match(str(value))
        if match is None:
            raise ValueError(f"Unrecognised duration: {value!r}")
        amount, unit = match.groups()
        delta = timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})
    if delta <= timedelta(0):
        raise ValueError(f"Duration must be positive: {value!r}")
    return delta


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    ACCESS_TOKEN_SECRET: str
        Key signing access tokens. Mirrored into ``JWT_SECRET_KEY`` so
        ``flask-jwt-extended`` verifies bearer/cookie tokens with it.
    ACCESS_TOKEN_EXPIRY: str
        Access token lifetime (``"15m"``, ``"1d"``, seconds).
    REFRESH_TOKEN_SECRET: str
        Key signing refresh tokens. Must differ from the access secret.
    REFRESH_TOKEN_EXPIRY: str
        Refresh token lifetime.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET: str
        Credentials of the media-hosting account.
    MEDIA_TIMEOUT_SECONDS: float
        Upper bound for a single media upload/delete call.
    UPLOAD_TMP_DIR: str | None
        Directory where multipart uploads are staged (system temp if unset).
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "")
    ACCESS_TOKEN_EXPIRY = os.getenv("ACCESS_TOKEN_EXPIRY", "15m")
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "")
    REFRESH_TOKEN_EXPIRY = os.getenv("REFRESH_TOKEN_EXPIRY", "10d")

    # flask-jwt-extended (access tokens + session cookies)
    JWT_SECRET_KEY = ACCESS_TOKEN_SECRET
    JWT_TOKEN_LOCATION = ["headers", "cookies"]
    JWT_ACCESS_COOKIE_NAME = "accessToken"
    JWT_REFRESH_COOKIE_NAME = "refreshToken"
    JWT_COOKIE_SECURE = True
    JWT_COOKIE_SAMESITE = "Strict"
    JWT_COOKIE_CSRF_PROTECT = False  # SameSite=Strict covers cross-site posts

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Media hosting
    CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME", "")
    CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY", "")
    CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET", "")
    CLOUDINARY_FOLDER = os.getenv("CLOUDINARY_FOLDER", "")
    MEDIA_TIMEOUT_SECONDS = float(os.getenv("MEDIA_TIMEOUT_SECONDS", "30"))
    UPLOAD_TMP_DIR = os.getenv("UPLOAD_TMP_DIR") or None
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(16 * 1024 * 1024)))

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default. Development secrets are filled in when the
    environment does not provide them so ``flask run`` works out of the box.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    ACCESS_TOKEN_SECRET = BaseConfig.ACCESS_TOKEN_SECRET or "dev-access-secret"
    REFRESH_TOKEN_SECRET = BaseConfig.REFRESH_TOKEN_SECRET or "dev-refresh-secret"
    JWT_SECRET_KEY = ACCESS_TOKEN_SECRET
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses fixed, distinct token secrets and the in-memory media store.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    ACCESS_TOKEN_SECRET = "test-access-secret-0123456789abcdef"
    REFRESH_TOKEN_SECRET = "test-refresh-secret-fedcba9876543210"
    JWT_SECRET_KEY = ACCESS_TOKEN_SECRET
    ACCESS_TOKEN_EXPIRY = "15m"
    REFRESH_TOKEN_EXPIRY = "10d"
    MEDIA_BACKEND = "memory"
    USE_PROXYFIX = False
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. Token secrets must come from the
    environment; :func:`vidtube.factory.create_app` refuses to start otherwise.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


# --------------------------------------------------------------------------- #
# Immutable runtime settings
# --------------------------------------------------------------------------- #


class ConfigurationError(RuntimeError):
    """Raised at start-up when mandatory settings are missing or unsafe."""


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Token emission settings built once from the Flask config.

    :param access_secret: Key signing access tokens.
    :type access_secret: str
    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_secret: Key signing refresh tokens.
    :type refresh_secret: str
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param algorithm: JWS algorithm shared by both token kinds.
    :type algorithm: str
    """

    access_secret: str
    access_expires: timedelta
    refresh_secret: str
    refresh_expires: timedelta
    algorithm: str = "HS256"

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> TokenSettings:
        """
        Build and validate token settings.

        :raises ConfigurationError: If a secret is missing, both secrets are
            equal, or an expiry cannot be parsed.
        """
        access_secret = str(config.get("ACCESS_TOKEN_SECRET") or "")
        refresh_secret = str(config.get("REFRESH_TOKEN_SECRET") or "")
        if not access_secret or not refresh_secret:
            raise ConfigurationError(
                "ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must both be set."
            )
        if access_secret == refresh_secret:
            raise ConfigurationError("Access and refresh tokens must use distinct secrets.")
        try:
            access_expires = parse_duration(config.get("ACCESS_TOKEN_EXPIRY", "15m"))
            refresh_expires = parse_duration(config.get("REFRESH_TOKEN_EXPIRY", "10d"))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        return cls(
            access_secret=access_secret,
            access_expires=access_expires,
            refresh_secret=refresh_secret,
            refresh_expires=refresh_expires,
            algorithm=str(config.get("JWT_ALGORITHM", "HS256")),
        )


@dataclass(frozen=True, slots=True)
class MediaSettings:
    """
    Media-hosting settings built once from the Flask config.

    :param cloud_name: Account (cloud) name used in API URLs.
    :param api_key: Public API key.
    :param api_secret: Secret used to sign API calls.
    :param folder: Optional folder prefix for uploaded assets.
    :param timeout: Per-call timeout in seconds.
    :param upload_tmp_dir: Staging directory for multipart uploads.
    """

    cloud_name: str
    api_key: str
    api_secret: str
    folder: str = ""
    timeout: float = 30.0
    upload_tmp_dir: str | None = None

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> MediaSettings:
        return cls(
            cloud_name=str(config.get("CLOUDINARY_CLOUD_NAME") or ""),
            api_key=str(config.get("CLOUDINARY_API_KEY") or ""),
            api_secret=str(config.get("CLOUDINARY_API_SECRET") or ""),
            folder=str(config.get("CLOUDINARY_FOLDER") or ""),
            timeout=float(config.get("MEDIA_TIMEOUT_SECONDS", 30.0)),
            upload_tmp_dir=config.get("UPLOAD_TMP_DIR") or None,
        )

    @property
    def configured(self) -> bool:
        """Return ``True`` when all credentials are present."""
        return bool(self.cloud_name and self.api_key and self.api_secret)
