from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Protocol

from werkzeug.utils import secure_filename

from ..core.constants import ALLOWED_LECTURE_EXTENSIONS
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


@dataclass(frozen=True)
class BlobRef:
    name: str
    url: str


class BlobStorage(Protocol):
    def save_pdf(self, stream: BinaryIO, original_name: str) -> BlobRef:
        raise NotImplementedError

    def delete(self, name: str) -> bool:
        raise NotImplementedError

    def name_from_url(self, url: str) -> Optional[str]:
        """Blob name when `url` points into this storage, else None."""

        raise NotImplementedError


class LocalBlobStorage(BlobStorage):
    """Lecture files kept on the local filesystem and served by the files route."""

    def __init__(self, root: str | os.PathLike, *, url_prefix: str = "/api/files/"):
        self._root = Path(root)
        self._url_prefix = url_prefix if url_prefix.endswith("/") else url_prefix + "/"

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, name: str) -> Path:
        safe = secure_filename(name)
        if not safe or safe != name:
            raise ValidationError("Invalid file name")
        return self._root / safe

    def save_pdf(self, stream: BinaryIO, original_name: str) -> BlobRef:
        filename = secure_filename(original_name or "")
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if ext not in ALLOWED_LECTURE_EXTENSIONS:
            raise ValidationError("Only PDF files can be uploaded")

        data = stream.read()
        if not data:
            raise ValidationError("The uploaded file is empty")
        if not data.startswith(PDF_MAGIC):
            raise ValidationError("The uploaded file is not a valid PDF")

        self._root.mkdir(parents=True, exist_ok=True)
        stem = filename.rsplit(".", 1)[0][:80] or "lecture"
        name = f"{uuid.uuid4().hex}_{stem}.{ext}"
        with open(self._root / name, "wb") as f:
            f.write(data)

        logger.info("Stored %s (%d bytes)", name, len(data))
        return BlobRef(name=name, url=f"{self._url_prefix}{name}")

    def delete(self, name: str) -> bool:
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("Blob %s already missing", name)
            return False
        logger.info("Deleted %s", name)
        return True

    def name_from_url(self, url: str) -> Optional[str]:
        if not url or not url.startswith(self._url_prefix):
            return None
        return url[len(self._url_prefix):] or None
