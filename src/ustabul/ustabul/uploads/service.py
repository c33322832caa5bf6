"""Stores uploaded images and documents on the local disk."""
from __future__ import annotations

import io
import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..core.constants import MAX_UPLOAD_MB, UPLOAD_FOLDERS, UPLOAD_MIME_TYPES
from ..core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    url: str
    file_name: str
    original_name: str
    size: int

    def to_dict(self) -> dict:
        return {"url": self.url, "fileName": self.file_name, "originalName": self.original_name, "size": self.size}


def canonical_path(base: Path, *parts: str) -> Path:
    """Resolve a path under `base`, refusing anything that escapes it."""
    base = base.resolve()
    target = base.joinpath(*parts).resolve()
    try:
        target.relative_to(base)
    except ValueError:
        raise ValidationError("Yanlış fayl yolu")
    return target


class UploadService:
    def __init__(self, root: str | Path, *, max_mb: int = MAX_UPLOAD_MB, url_prefix: str = "/media"):
        self._root = Path(root)
        self._max_bytes = int(max_mb) * 1024 * 1024
        self._url_prefix = url_prefix.rstrip("/")

    def save(self, file: Optional[FileStorage], *, folder: Optional[str] = None) -> StoredFile:
        if file is None or not file.filename:
            raise ValidationError("Fayl seçilməyib")

        folder = (folder or "uploads").strip().lower()
        if folder not in UPLOAD_FOLDERS:
            raise ValidationError("Yanlış qovluq")

        mimetype = (file.mimetype or "").lower()
        ext = UPLOAD_MIME_TYPES.get(mimetype)
        if not ext:
            raise ValidationError("Bu fayl tipi dəstəklənmir. Yalnız JPG, PNG, WEBP, GIF və PDF")

        content = file.read()
        if not content:
            raise ValidationError("Fayl boşdur")
        if len(content) > self._max_bytes:
            raise ValidationError(f"Fayl çox böyükdür (maksimum {self._max_bytes // (1024 * 1024)} MB)")

        if mimetype.startswith("image/"):
            try:
                with Image.open(io.BytesIO(content)) as img:
                    img.verify()
            except (UnidentifiedImageError, OSError, SyntaxError):
                raise ValidationError("Şəkil faylı zədələnib")

        name = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}"
        target = canonical_path(self._root, folder, name)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.info("Stored upload %s/%s (%d bytes)", folder, name, len(content))

        return StoredFile(
            url=f"{self._url_prefix}/{folder}/{name}",
            file_name=name,
            original_name=secure_filename(file.filename) or name,
            size=len(content),
        )

    def resolve(self, folder: str, name: str) -> Path:
        if folder not in UPLOAD_FOLDERS:
            raise NotFoundError("Fayl tapılmadı")
        path = canonical_path(self._root, folder, secure_filename(name))
        if not path.is_file():
            raise NotFoundError("Fayl tapılmadı")
        return path
