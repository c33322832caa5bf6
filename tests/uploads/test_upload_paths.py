import io
from pathlib import Path

import pytest
from PIL import Image
from werkzeug.datastructures import FileStorage

from src.ustabul.ustabul.core.exceptions import NotFoundError, ValidationError
from src.ustabul.ustabul.uploads.service import UploadService, canonical_path


def image_file(name="foto.jpg", mimetype="image/jpeg") -> FileStorage:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color=(10, 120, 200)).save(buffer, format="JPEG")
    buffer.seek(0)
    return FileStorage(stream=buffer, filename=name, content_type=mimetype)


def test_canonical_path_stays_under_base(tmp_path):
    assert canonical_path(tmp_path, "orders", "a.png") == (tmp_path / "orders" / "a.png").resolve()

    with pytest.raises(ValidationError):
        canonical_path(tmp_path, "..", "etc", "passwd")


def test_save_and_resolve(tmp_path):
    service = UploadService(tmp_path)

    stored = service.save(image_file("../../Mənim şəklim.jpg"), folder="Avatars")

    assert stored.url == f"/media/avatars/{stored.file_name}"
    assert stored.file_name.endswith(".jpg")
    assert "/" not in stored.original_name
    assert service.resolve("avatars", stored.file_name) == (tmp_path / "avatars" / stored.file_name).resolve()
    assert Path(tmp_path / "avatars" / stored.file_name).stat().st_size == stored.size


def test_unknown_folder_rejected(tmp_path):
    with pytest.raises(ValidationError):
        UploadService(tmp_path).save(image_file(), folder="secrets")


def test_size_limit(tmp_path):
    big = FileStorage(stream=io.BytesIO(b"%PDF" + b"0" * (1024 * 1024 + 1)), filename="doc.pdf", content_type="application/pdf")

    with pytest.raises(ValidationError):
        UploadService(tmp_path, max_mb=1).save(big)


def test_pdf_is_not_image_checked(tmp_path):
    pdf = FileStorage(stream=io.BytesIO(b"%PDF-1.4 demo"), filename="qaimə.pdf", content_type="application/pdf")

    stored = UploadService(tmp_path).save(pdf, folder="orders")

    assert stored.file_name.endswith(".pdf")


def test_resolve_missing_file(tmp_path):
    with pytest.raises(NotFoundError):
        UploadService(tmp_path).resolve("orders", "nope.png")
