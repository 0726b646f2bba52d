import asyncio
import base64
import io
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Tuple, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from ..core.clock import utc_now
from ..core.config import settings
from ..database.local_photo_store import local_photo_store
from ..models.result import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)

PhotoSource = Union[bytes, bytearray, str, os.PathLike, Any]


class PhotoProcessingError(Exception):
    pass


def scaled_size(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """
    Landscape images are bounded by max_width, portrait and square ones by
    max_height. Aspect ratio is kept and images are never enlarged.
    """
    new_width, new_height = float(width), float(height)
    if width > height:
        if width > max_width:
            new_height = height * max_width / width
            new_width = max_width
    else:
        if height > max_height:
            new_width = width * max_height / height
            new_height = max_height
    return max(1, round(new_width)), max(1, round(new_height))


def _read_source(file: PhotoSource) -> bytes:
    try:
        if isinstance(file, (bytes, bytearray)):
            return bytes(file)
        if isinstance(file, (str, os.PathLike)):
            return Path(file).read_bytes()

        # FastAPI UploadFile exposes the spooled file as .file
        stream = getattr(file, "file", file)
        if hasattr(stream, "seek"):
            stream.seek(0)
        data = stream.read()
    except (OSError, AttributeError, TypeError) as e:
        raise PhotoProcessingError(f"File could not be read: {e}")

    if not isinstance(data, (bytes, bytearray)):
        raise PhotoProcessingError("File could not be read: expected binary content")
    return bytes(data)


def _compress(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise PhotoProcessingError(f"Image could not be loaded: {e}")

    width, height = scaled_size(
        img.width, img.height, settings.PHOTO_MAX_WIDTH, settings.PHOTO_MAX_HEIGHT
    )
    if (width, height) != img.size:
        img = img.resize((width, height), Image.LANCZOS)

    # JPEG has no alpha channel: flatten onto white
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        img = background
    elif img.mode != "RGB":
        img = img.convert("RGB")

    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=settings.PHOTO_JPEG_QUALITY)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/jpeg;base64,{encoded}"


class PhotoService:
    """
    Report photos are kept inline as compressed JPEG data URLs, optionally
    mirrored into local-only storage.
    """

    def __init__(self):
        self.store = local_photo_store

    async def compress_and_convert_to_base64(self, file: PhotoSource) -> str:
        """Decode, downscale and re-encode one image; raises PhotoProcessingError."""
        data = _read_source(file)
        return await asyncio.to_thread(_compress, data)

    async def save_photo_url(self, photo_file: PhotoSource, folder: str = "general") -> ServiceResult:
        try:
            compressed = await self.compress_and_convert_to_base64(photo_file)
            logger.debug(f"Compressed photo for {folder}: {len(compressed)} chars")
            return ServiceResult.ok(url=compressed)
        except PhotoProcessingError as e:
            return ServiceResult.fail(str(e), ErrorKind.PHOTO)
        except Exception as e:
            logger.error(f"Error saving photo: {e}")
            return ServiceResult.fail(str(e))

    async def save_multiple_photo_urls(self, photo_files: Iterable[PhotoSource], folder: str = "general") -> ServiceResult:
        """Compress files one at a time, keeping input order. One bad file fails the batch."""
        try:
            photos = []
            for photo_file in photo_files:
                photos.append(await self.compress_and_convert_to_base64(photo_file))
            logger.debug(f"Compressed {len(photos)} photos for {folder}")
            return ServiceResult.ok(photos=photos)
        except PhotoProcessingError as e:
            return ServiceResult.fail(str(e), ErrorKind.PHOTO)
        except Exception as e:
            logger.error(f"Error saving photos: {e}")
            return ServiceResult.fail(str(e))

    @staticmethod
    def build_storage_key(report_id: str, photo_type: str) -> str:
        timestamp = round(utc_now().timestamp() * 1000)
        return f"photo_{report_id}_{photo_type}_{timestamp}"

    async def save_photo_to_local_storage(self, photo_file: PhotoSource, report_id: str, photo_type: str) -> ServiceResult:
        try:
            compressed = await self.compress_and_convert_to_base64(photo_file)
            storage_key = self.build_storage_key(report_id, photo_type)
            self.store.set_item(storage_key, compressed)
            return ServiceResult.ok(url=compressed, storageKey=storage_key)
        except PhotoProcessingError as e:
            return ServiceResult.fail(str(e), ErrorKind.PHOTO)
        except ValueError as e:
            return ServiceResult.fail(str(e), ErrorKind.VALIDATION)
        except Exception as e:
            logger.error(f"Error storing photo for report {report_id}: {e}")
            return ServiceResult.fail(str(e), ErrorKind.STORAGE)

    async def get_photo_from_local_storage(self, storage_key: str) -> ServiceResult:
        try:
            photo_data = self.store.get_item(storage_key)
            if photo_data:
                return ServiceResult.ok(url=photo_data)
            return ServiceResult.fail("Photo not found", ErrorKind.NOT_FOUND)
        except ValueError as e:
            return ServiceResult.fail(str(e), ErrorKind.VALIDATION)
        except Exception as e:
            logger.error(f"Error reading photo {storage_key}: {e}")
            return ServiceResult.fail(str(e), ErrorKind.STORAGE)

    async def delete_photo_from_local_storage(self, storage_key: str) -> ServiceResult:
        try:
            self.store.remove_item(storage_key)
            return ServiceResult.ok(message="Photo removed from local storage")
        except ValueError as e:
            return ServiceResult.fail(str(e), ErrorKind.VALIDATION)
        except Exception as e:
            logger.error(f"Error deleting photo {storage_key}: {e}")
            return ServiceResult.fail(str(e), ErrorKind.STORAGE)

    async def delete_photo_url(self, photo_url: str) -> ServiceResult:
        # Inline data URLs live inside the report itself
        return ServiceResult.ok(message="Photo deleted")


photo_service = PhotoService()
