"""
Upload handling for the file conversion endpoint.

Uploads are type-checked before anything touches disk, then streamed into
the upload directory under a unique name. The size cap is enforced while
writing; a partial file is removed if the cap is exceeded.
"""

import logging
import secrets
import time
from pathlib import Path

from fastapi import UploadFile

from .errors import UploadTooLarge

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "htmlFile"
HTML_CONTENT_TYPE = "text/html"
CHUNK_SIZE = 64 * 1024


def is_html_upload(upload: UploadFile) -> bool:
    """Accept text/html uploads or anything named *.html."""
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    filename = (upload.filename or "").lower()
    return content_type == HTML_CONTENT_TYPE or filename.endswith(".html")


def unique_upload_name(field: str = UPLOAD_FIELD) -> str:
    """``<field>-<epoch ms>-<random>.html`` - unique across concurrent requests."""
    return f"{field}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}.html"


async def store_upload(upload: UploadFile, upload_dir: Path, max_bytes: int) -> Path:
    """
    Stream an upload into ``upload_dir``.

    Args:
        upload: Incoming multipart file
        upload_dir: Shared temp directory (created if missing)
        max_bytes: Size cap

    Returns:
        Path of the stored file; the caller owns its deletion

    Raises:
        UploadTooLarge: If the upload exceeds ``max_bytes``
    """
    upload_dir = Path(upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    path = upload_dir / unique_upload_name()

    written = 0
    try:
        with path.open("xb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise UploadTooLarge(
                        f"File too large: maximum upload size is {max_bytes} bytes"
                    )
                out.write(chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    finally:
        await upload.close()

    logger.debug(f"Stored upload {upload.filename!r} as {path.name} ({written} bytes)")
    return path
