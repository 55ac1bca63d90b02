"""
vidtube.services._shared.ports
==============================

*Ports* (hexagonal interfaces) the service layer depends on.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`: JWT creation and refresh-token decoding.

- :mod:`media_store`:
    Defines :class:`~.MediaStore`: upload/delete against the media host,
    plus :class:`~.InMemoryMediaStore` for tests.

Concrete adapters live under ``vidtube.infra``.
"""

from __future__ import annotations

from .media_store import InMemoryMediaStore, MediaStore, MediaStoreError
from .token_provider import StubTokenProvider, TokenProvider

__all__ = [
    "TokenProvider",
    "StubTokenProvider",
    "MediaStore",
    "MediaStoreError",
    "InMemoryMediaStore",
]
