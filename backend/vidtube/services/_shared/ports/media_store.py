from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Protocol


class MediaStoreError(Exception):
    """Raised by media adapters when an upload or delete does not succeed."""


class MediaStore(Protocol):
    """Port for the external object store that hosts user images."""

    def upload(self, path: str | Path) -> str:
        """Upload a staged local file and return its public URL."""
        ...

    def delete(self, url: str) -> None:
        """Delete a previously uploaded asset identified by its URL."""
        ...


class InMemoryMediaStore(MediaStore):
    """
    Process-local media store for tests and development.

    Uploaded file bytes are kept in a dict keyed by a synthetic URL. Failures
    can be injected per operation to exercise error paths.

    :param fail_uploads: Filename suffixes whose upload is rejected; ``"*"``
        rejects every upload.
    :param fail_deletes: Reject every delete.
    """

    base_url = "https://media.test/vidtube"

    def __init__(self, *, fail_uploads: Iterable[str] = (), fail_deletes: bool = False) -> None:
        self.assets: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_uploads = set(fail_uploads)
        self.fail_deletes = fail_deletes
        self._seq = 0

    def upload(self, path: str | Path) -> str:
        path = Path(path)
        if "*" in self.fail_uploads or any(path.name.endswith(p) for p in self.fail_uploads):
            raise MediaStoreError(f"upload rejected: {path.name}")
        if not path.is_file():
            raise MediaStoreError(f"nothing staged at {path}")
        self._seq += 1
        url = f"{self.base_url}/{self._seq}-{path.name}"
        self.assets[url] = path.read_bytes()
        return url

    def delete(self, url: str) -> None:
        if self.fail_deletes:
            raise MediaStoreError(f"delete rejected: {url}")
        self.assets.pop(url, None)
        self.deleted.append(url)
