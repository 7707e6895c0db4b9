"""
Unit tests for the image store.
"""
import asyncio
import io
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from fastapi import UploadFile
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from storage import ImageStore, UploadTooLarge, read_upload, upload_timestamp

FIXED_STAMP = "2023-05-04T10-20-30.456Z"


@pytest.fixture
def store(tmp_path):
    return ImageStore(tmp_path / "uploads")


class TestUploadTimestamp:

    def test_colons_are_replaced(self):
        now = datetime(2023, 5, 4, 10, 20, 30, 456789, tzinfo=timezone.utc)
        assert upload_timestamp(now) == FIXED_STAMP


class TestImageStore:
    """Tests for ImageStore.store."""

    @pytest.mark.parametrize("mime", ["image/jpeg", "image/png", "image/webp"])
    def test_accepted_types(self, store, mime):
        path = store.store(b"data", "pic.img", mime)
        assert path.startswith("uploads/")
        assert (store.directory / path.split("/", 1)[1]).read_bytes() == b"data"

    @pytest.mark.parametrize("mime", ["application/pdf", "image/gif", "text/plain", None])
    def test_rejected_types_store_nothing(self, store, mime):
        assert store.store(b"data", "doc.pdf", mime) is None
        assert not store.directory.exists() or list(store.directory.iterdir()) == []

    def test_filename_is_timestamp_then_original_name(self, store):
        with patch("storage.upload_timestamp", return_value=FIXED_STAMP):
            path = store.store(b"data", "mint.png", "image/png")
        assert path == f"uploads/{FIXED_STAMP}mint.png"

    def test_client_path_is_stripped(self, store):
        with patch("storage.upload_timestamp", return_value=FIXED_STAMP):
            path = store.store(b"data", "../../etc/mint.png", "image/png")
        assert path == f"uploads/{FIXED_STAMP}mint.png"
        assert (store.directory / f"{FIXED_STAMP}mint.png").exists()

    def test_directory_is_created(self, store):
        assert not store.directory.exists()
        store.store(b"data", "mint.png", "image/png")
        assert store.directory.is_dir()


class TestReadUpload:
    """Tests for the upload size limit."""

    def read(self, upload, limit):
        return asyncio.run(read_upload(upload, limit))

    def test_no_file(self):
        assert self.read(None, 10) is None

    def test_empty_filename_means_no_file(self):
        assert self.read(UploadFile(io.BytesIO(b"abc"), filename=""), 10) is None

    def test_within_limit(self):
        upload = UploadFile(io.BytesIO(b"x" * 10), filename="a.png")
        assert self.read(upload, 10) == b"x" * 10

    def test_over_limit(self):
        upload = UploadFile(io.BytesIO(b"x" * 11), filename="a.png")
        with pytest.raises(UploadTooLarge):
            self.read(upload, 10)
