"""Stage multipart uploads on local disk for the duration of one call."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

log = logging.getLogger(__name__)


@contextmanager
def stage_upload(upload: FileStorage | None, tmp_dir: str | None = None) -> Iterator[Path | None]:
    """
    Write ``upload`` to a temporary file and yield its path.

    The file is removed on every exit path, including when the body raises.
    ``None`` (or an upload without a filename) yields ``None`` so optional
    fields need no special casing at the call site.

    :param upload: File part from ``request.files``.
    :param tmp_dir: Directory for the staged copy (system temp if ``None``).
    """
    if upload is None or not upload.filename:
        yield None
        return

    name = secure_filename(upload.filename) or "upload"
    fd, raw_path = tempfile.mkstemp(prefix="vidtube-", suffix=f"-{name}", dir=tmp_dir)
    path = Path(raw_path)
    try:
        with os.fdopen(fd, "wb") as fh:
            upload.save(fh)
        yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            log.warning("Could not remove staged upload %s", path, exc_info=True)
