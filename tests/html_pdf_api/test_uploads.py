"""
Unit tests for upload storage helpers.
"""

import re
from io import BytesIO

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from html_pdf_api.errors import UploadTooLarge
from html_pdf_api.uploads import is_html_upload, store_upload, unique_upload_name


def _upload(data: bytes, filename: str, content_type: str) -> UploadFile:
    return UploadFile(
        file=BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


class TestIsHtmlUpload:
    """Tests for the upload type check."""

    def test_html_mime_accepted(self):
        assert is_html_upload(_upload(b"", "page.bin", "text/html"))

    def test_html_mime_with_charset_accepted(self):
        assert is_html_upload(_upload(b"", "page", "text/html; charset=utf-8"))

    def test_html_extension_accepted(self):
        assert is_html_upload(_upload(b"", "Report.HTML", "application/octet-stream"))

    def test_text_file_rejected(self):
        assert not is_html_upload(_upload(b"", "notes.txt", "text/plain"))


class TestUniqueUploadName:
    """Tests for collision-free temp names."""

    def test_name_format(self):
        assert re.fullmatch(r"htmlFile-\d+-\d+\.html", unique_upload_name())

    def test_names_differ(self):
        names = {unique_upload_name() for _ in range(50)}
        assert len(names) > 1


class TestStoreUpload:
    """Tests for store_upload()."""

    @pytest.mark.asyncio
    async def test_stores_content(self, tmp_path):
        upload_dir = tmp_path / "uploads"

        path = await store_upload(_upload(b"<h1>Hi</h1>", "a.html", "text/html"), upload_dir, 1024)

        assert path.parent == upload_dir
        assert path.read_bytes() == b"<h1>Hi</h1>"

    @pytest.mark.asyncio
    async def test_oversized_upload_leaves_nothing_behind(self, tmp_path):
        upload_dir = tmp_path / "uploads"

        with pytest.raises(UploadTooLarge) as exc:
            await store_upload(_upload(b"x" * 100, "a.html", "text/html"), upload_dir, 10)

        assert exc.value.status_code == 413
        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_exact_limit_is_accepted(self, tmp_path):
        path = await store_upload(_upload(b"x" * 10, "a.html", "text/html"), tmp_path, 10)
        assert path.stat().st_size == 10
