"""ReferenceImage handle tests."""

from __future__ import annotations

import pytest
from PIL import Image

from modules.errors import ValidationError
from modules.ui.reference_image import ReferenceImage


@pytest.fixture
def photo(tmp_path):
    path = tmp_path / "photo.png"
    Image.new("RGB", (800, 400), "blue").save(path, format="PNG")
    return path


def test_open_reads_file_and_writes_preview(tmp_path, photo):
    before = ReferenceImage.outstanding()
    handle = ReferenceImage.open(photo, preview_dir=tmp_path / "previews")

    try:
        assert ReferenceImage.outstanding() == before + 1
        assert handle.file.name == "photo.png"
        assert handle.file.mime_type == "image/png"
        assert handle.preview_path.parent == tmp_path / "previews"
        with Image.open(handle.preview_path) as preview:
            assert max(preview.size) == 256
    finally:
        handle.release()

    assert ReferenceImage.outstanding() == before
    assert not handle.preview_path.exists()


def test_release_is_idempotent(tmp_path, photo):
    before = ReferenceImage.outstanding()
    handle = ReferenceImage.open(photo, preview_dir=tmp_path)

    handle.release()
    handle.release()

    assert handle.released
    assert ReferenceImage.outstanding() == before


def test_context_manager_releases(tmp_path, photo):
    before = ReferenceImage.outstanding()

    with ReferenceImage.open(photo, preview_dir=tmp_path) as handle:
        assert handle.preview_path.exists()

    assert ReferenceImage.outstanding() == before
    assert not handle.preview_path.exists()


def test_invalid_file_creates_no_handle(tmp_path):
    bogus = tmp_path / "bogus.png"
    bogus.write_bytes(b"nope")
    previews = tmp_path / "previews"
    before = ReferenceImage.outstanding()

    with pytest.raises(ValidationError):
        ReferenceImage.open(bogus, preview_dir=previews)

    assert ReferenceImage.outstanding() == before
    assert not previews.exists() or not any(previews.iterdir())
