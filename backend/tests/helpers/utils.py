"""Tiny helpers shared across test modules."""

from __future__ import annotations

import io
from contextlib import contextmanager
from pathlib import Path

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@contextmanager
def not_raises(exception: type[BaseException]):
    """Context manager asserting that an exception is *not* raised.

    Parameters
    ----------
    exception: type[BaseException]
        Exception type that should not be raised within the context.
    """
    try:
        yield
    except exception as exc:  # pragma: no cover
        raise AssertionError(f"Did raise {exception}: {exc}") from exc


def image_part(name: str = "avatar.png", data: bytes = PNG_BYTES) -> tuple[io.BytesIO, str]:
    """Return a ``(stream, filename)`` pair usable in a multipart ``data`` dict."""
    return io.BytesIO(data), name


def staged_file(tmp_path: Path, name: str = "avatar.png", data: bytes = PNG_BYTES) -> Path:
    """Write ``data`` under ``tmp_path`` as if an upload had been staged."""
    path = tmp_path / name
    path.write_bytes(data)
    return path


def auth_header(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


def register_payload(**overrides) -> dict:
    """Multipart body for ``POST /users/register`` with an avatar attached."""
    payload = {
        "fullName": "Alice Example",
        "email": "a@x.com",
        "username": "alice",
        "password": "p",
        "avatar": image_part("avatar.png"),
    }
    payload.update(overrides)
    return {k: v for k, v in payload.items() if v is not None}
