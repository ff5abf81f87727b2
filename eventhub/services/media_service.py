"""
Media processing for event pictures.

UPLOAD PIPELINE
===============

Each gate short-circuits with InvalidImageError (400):

  1. Presence    - the form part must be a file, not a text field
  2. Size        - at most MAX_UPLOAD_BYTES (5 MiB), checked on the declared
                   part size before reading and again on the bytes read
  3. Sniffing    - the MIME type comes from the magic bytes (filetype),
                   never from the client's Content-Type or file name
  4. Allow-list  - jpeg / png / webp only, even if something else sniffs
                   as an image (gif, bmp, svg, ...)
  5. Re-encode   - Pillow decodes and writes a fresh file, dropping EXIF,
                   ICC profiles and text chunks

The stored name is a random UUID plus the extension of the sniffed type, so
client file names never reach the filesystem. The reference saved on the
event row is that bare name; serving it is the static file server's job.
"""

import io
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import filetype
from PIL import Image
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from eventhub.core.errors import InvalidImageError, StorageWriteError
from eventhub.core.logging import get_logger
from eventhub.core.metrics import record_image_upload

logger = get_logger(__name__)

ALLOWED_MIME_TYPES = frozenset({"image/jpg", "image/jpeg", "image/png", "image/webp"})

# Pillow encoder per allowed MIME type
PILLOW_FORMATS = {
    "image/jpg": "JPEG",
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
}

# Image.info keys that carry pixels semantics rather than metadata
PRESERVED_INFO_KEYS = frozenset({"transparency"})


@dataclass(frozen=True)
class SanitizedImage:
    data: bytes
    mime: str
    extension: str


def _reject(result: str, message: str, **context) -> InvalidImageError:
    logger.warning("image_rejected", reason=result, **context)
    record_image_upload(result)
    return InvalidImageError(message)


def generate_filename(extension: str) -> str:
    """Random, collision-free file name for a stored upload."""
    return f"{uuid.uuid4().hex}.{extension}"


def reencode_image(data: bytes, mime: str) -> bytes:
    """Decode and re-encode ``data`` in the same format without metadata."""
    image_format = PILLOW_FORMATS[mime]
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if image_format == "JPEG" and img.mode not in ("RGB", "L", "CMYK"):
                img = img.convert("RGB")
            img.info = {k: v for k, v in img.info.items() if k in PRESERVED_INFO_KEYS}

            out = io.BytesIO()
            img.save(out, format=image_format)
            return out.getvalue()
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise _reject("undecodable", "Invalid image", error=type(e).__name__)


async def validate_image(upload: Any, max_bytes: int) -> SanitizedImage:
    """Run the upload gates and return re-encoded image bytes."""
    if not isinstance(upload, UploadFile):
        raise _reject("missing", "Invalid image", received=type(upload).__name__)

    if upload.size is not None and upload.size > max_bytes:
        raise _reject("too_large", "File size too large", size=upload.size)

    # One byte past the cap is enough to know it is too large
    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise _reject("too_large", "File size too large", size=len(data))

    kind = filetype.guess(data)
    if kind is None or not kind.mime.startswith("image/"):
        raise _reject("not_image", "Invalid file type", sniffed=kind.mime if kind else None)

    if kind.mime not in ALLOWED_MIME_TYPES:
        raise _reject("unsupported", "Unsupported file format", sniffed=kind.mime)

    clean = await run_in_threadpool(reencode_image, data, kind.mime)
    return SanitizedImage(data=clean, mime=kind.mime, extension=kind.extension)


async def store_image(image: SanitizedImage, upload_dir: str) -> str:
    """Write the sanitized image under ``upload_dir`` and return its file name."""
    file_name = generate_filename(image.extension)
    directory = Path(upload_dir)

    def _write() -> None:
        directory.mkdir(parents=True, exist_ok=True)
        (directory / file_name).write_bytes(image.data)

    try:
        await run_in_threadpool(_write)
    except OSError as e:
        logger.error("image_write_failed", directory=str(directory), error=str(e))
        record_image_upload("write_failed")
        raise StorageWriteError()

    record_image_upload("stored")
    logger.info("image_stored", file_name=file_name, mime=image.mime, size=len(image.data))
    return file_name


async def discard_image(file_name: str, upload_dir: str) -> None:
    """Remove a stored image whose event could not be saved."""
    path = Path(upload_dir) / file_name
    try:
        await run_in_threadpool(path.unlink, missing_ok=True)
    except OSError as e:
        logger.error("image_discard_failed", file_name=file_name, error=str(e))
    else:
        logger.info("image_discarded", file_name=file_name)
