"""File handling service for scan and ingredient images."""
import logging
import uuid
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from nutriguard.config import settings
from nutriguard.services.generation_contract import ImagePart

logger = logging.getLogger(__name__)

# Pillow format name -> media type accepted by the vision API
SUPPORTED_FORMATS = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


class FileService:
    """Service for decoding, normalising and storing uploaded images."""

    def __init__(
        self,
        upload_dir: Optional[str] = None,
        max_dimension: Optional[int] = None,
        max_bytes: Optional[int] = None,
    ):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.max_dimension = max_dimension or settings.max_image_dimension
        self.max_bytes = max_bytes or settings.max_image_bytes

    def prepare_image(self, data: bytes) -> ImagePart:
        """
        Identify an image from raw bytes and make it sendable.

        JPEG/PNG/GIF/WEBP within the dimension and byte limits are passed
        through untouched. Anything else Pillow can read (BMP, TIFF, oversized
        photos, ...) is downscaled and re-encoded as JPEG.

        Raises:
            ValueError: If the bytes are empty or not a readable image
        """
        if not data:
            raise ValueError("Image is empty")

        try:
            with Image.open(BytesIO(data)) as img:
                media_type = SUPPORTED_FORMATS.get(img.format)
                if (
                    media_type
                    and max(img.size) <= self.max_dimension
                    and len(data) <= self.max_bytes
                ):
                    return ImagePart(data=data, media_type=media_type)

                logger.debug(
                    "Re-encoding %s image (%dx%d, %d bytes) as JPEG",
                    img.format,
                    img.width,
                    img.height,
                    len(data),
                )
                return ImagePart(data=self._optimize_image(img), media_type="image/jpeg")
        except (UnidentifiedImageError, OSError) as e:
            raise ValueError(f"Unreadable image: {e}") from e

    def _optimize_image(self, img: Image.Image) -> bytes:
        """
        Downscale and encode an image as JPEG within the configured limits.

        Quality steps down from 85 first; if that is not enough the image
        keeps halving in size until it fits.
        """
        # Flatten transparency onto white
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            img = img.convert("RGBA")
            rgb_img = Image.new("RGB", img.size, (255, 255, 255))
            rgb_img.paste(img, mask=img.split()[3])
            img = rgb_img
        else:
            img = img.convert("RGB")

        img.thumbnail((self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS)

        quality = 85
        while True:
            buffer = BytesIO()
            img.save(buffer, format="JPEG", optimize=True, quality=quality)
            if buffer.tell() <= self.max_bytes:
                return buffer.getvalue()

            if quality > 40:
                quality -= 15
            elif img.width > 1 or img.height > 1:
                img = img.resize(
                    (max(1, img.width // 2), max(1, img.height // 2)),
                    Image.Resampling.LANCZOS,
                )
            else:
                raise ValueError(f"Image cannot be reduced below {self.max_bytes} bytes")

    def save_scan_image(self, image: ImagePart) -> str:
        """
        Save a scanned food image to disk.

        Returns:
            Relative path to saved file, used as the scan record's image reference
        """
        self.upload_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        unique_id = str(uuid.uuid4())[:8]
        extension = EXTENSIONS.get(image.media_type, ".jpg")
        file_path = self.upload_dir / f"{timestamp}_{unique_id}{extension}"

        with open(file_path, "wb") as f:
            f.write(image.data)

        return str(file_path)

    def delete_file(self, file_path: str) -> bool:
        """
        Delete a file from disk.

        Returns:
            True if deleted, False if file not found
        """
        path = Path(file_path)
        if path.exists():
            path.unlink()
            return True
        return False


# Singleton instance
file_service = FileService()
