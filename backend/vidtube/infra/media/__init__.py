"""Media-hosting adapters and upload staging."""

from __future__ import annotations

from flask import Flask

from vidtube.core.config import MediaSettings
from vidtube.services._shared.ports import InMemoryMediaStore, MediaStore

from .cloudinary_store import CloudinaryMediaStore
from .staging import stage_upload

MEDIA_EXTENSION_KEY = "vidtube.media_store"


def init_app(app: Flask, settings: MediaSettings) -> MediaStore:
    """Build the configured media store once and register it on ``app``.

    ``MEDIA_BACKEND=memory`` selects the in-process store; anything else uses
    Cloudinary with the credentials in ``settings``.
    """
    backend = str(app.config.get("MEDIA_BACKEND", "cloudinary")).lower()
    store: MediaStore
    if backend == "memory":
        store = InMemoryMediaStore()
    else:
        if not settings.configured:
            app.logger.warning("Cloudinary credentials are incomplete; uploads will fail")
        store = CloudinaryMediaStore(settings)
    app.extensions[MEDIA_EXTENSION_KEY] = store
    return store


__all__ = ["CloudinaryMediaStore", "MEDIA_EXTENSION_KEY", "init_app", "stage_upload"]
