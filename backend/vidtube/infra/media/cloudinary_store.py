"""Cloudinary SDK adapter for the :class:`MediaStore` port."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from vidtube.core.config import MediaSettings
from vidtube.services._shared.ports import MediaStore, MediaStoreError

log = logging.getLogger(__name__)

_VERSION_SEGMENT = re.compile(r"^v\d+$")


def parse_asset_url(url: str) -> tuple[str, str]:
    """
    Extract ``(resource_type, public_id)`` from a delivery URL.

    ``https://res.cloudinary.com/demo/image/upload/v17/avatars/a1.png``
    yields ``("image", "avatars/a1")``.

    :raises MediaStoreError: If the URL is not a Cloudinary upload URL.
    """
    parts = [p for p in urlparse(url).path.split("/") if p]
    try:
        upload_at = parts.index("upload")
    except ValueError:
        raise MediaStoreError(f"not a hosted asset URL: {url}") from None
    if upload_at < 1 or upload_at + 1 >= len(parts):
        raise MediaStoreError(f"not a hosted asset URL: {url}")
    resource_type = parts[upload_at - 1]
    tail = parts[upload_at + 1 :]
    if _VERSION_SEGMENT.match(tail[0]) and len(tail) > 1:
        tail = tail[1:]
    public_id = "/".join(tail)
    public_id = public_id.rsplit(".", 1)[0] if "." in tail[-1] else public_id
    return resource_type, public_id


class CloudinaryMediaStore(MediaStore):
    """
    Upload/delete images through the Cloudinary SDK.

    Credentials travel with every call instead of the SDK-global
    ``cloudinary.config()``. Each call is bounded by ``settings.timeout``;
    nothing is retried.
    """

    def __init__(self, settings: MediaSettings) -> None:
        self.settings = settings

    def _options(self, **extra: Any) -> dict[str, Any]:
        if not self.settings.configured:
            raise MediaStoreError("media host credentials are not configured")
        return {
            "cloud_name": self.settings.cloud_name,
            "api_key": self.settings.api_key,
            "api_secret": self.settings.api_secret,
            "timeout": self.settings.timeout,
            **extra,
        }

    def upload(self, path: str | Path) -> str:
        options = self._options(resource_type="auto")
        if self.settings.folder:
            options["folder"] = self.settings.folder
        try:
            body = cloudinary.uploader.upload(str(path), **options)
        except (CloudinaryError, OSError) as exc:
            raise MediaStoreError(f"upload failed: {exc}") from exc
        url = (body or {}).get("secure_url") or (body or {}).get("url")
        if not url:
            raise MediaStoreError("upload response carried no URL")
        log.info("media.uploaded", extra={"endpoint": "cloudinary.upload"})
        return str(url)

    def delete(self, url: str) -> None:
        options = self._options()
        resource_type, public_id = parse_asset_url(url)
        try:
            body = cloudinary.uploader.destroy(
                public_id, resource_type=resource_type, invalidate=True, **options
            )
        except CloudinaryError as exc:
            raise MediaStoreError(f"destroy failed for {public_id}: {exc}") from exc
        result = (body or {}).get("result")
        # "not found" means the asset is already gone.
        if result not in ("ok", "not found"):
            raise MediaStoreError(f"destroy failed for {public_id}: {result}")
