"""Local file storage for uploaded recipe images.

Images are written under ``<root>/recipes/`` with a random name; the value
stored on the recipe is the path relative to ``root`` (``recipes/<name>``).
"""

from __future__ import annotations

import asyncio
import io
import uuid
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Final

from PIL import Image

from recipe_catalog.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import UploadFile

logger = get_logger(__name__)

IMAGE_PREFIX: Final[str] = "recipes"

# Pillow format name -> stored extension
_FORMATS: Final[dict[str, str]] = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "GIF": ".gif",
    "BMP": ".bmp",
    "WEBP": ".webp",
}

INVALID_TYPE_MESSAGE: Final[str] = (
    "The image must be a file of type: jpeg, png, gif, bmp, webp"
)


class InvalidImageError(ValueError):
    """Raised when an upload is not an accepted image or is too large."""


def _detect_format(data: bytes) -> str | None:
    """Return the Pillow format of ``data`` if it is a well-formed image."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.verify()
            return image.format
    except (Image.DecompressionBombError, OSError, SyntaxError, ValueError):
        return None


class ImageStore:
    """Save and delete recipe images on the local filesystem."""

    def __init__(self, root: Path | str, max_size_kb: int = 2048) -> None:
        self.root = Path(root)
        self.max_size_bytes = max_size_kb * 1024

    def path_for(self, relative_path: str) -> Path:
        """Resolve a stored relative path, refusing paths outside ``root``."""
        parts = PurePosixPath(relative_path).parts
        if not parts or parts[0] != IMAGE_PREFIX or ".." in parts:
            msg = f"Invalid image path: {relative_path}"
            raise ValueError(msg)
        return self.root.joinpath(*parts)

    async def save(self, upload: UploadFile) -> str:
        """Validate and store an uploaded image.

        The declared content type must be an image type and the bytes must
        decode as one of the accepted formats; the stored extension follows
        the decoded format.

        Returns:
            Relative path of the stored file.

        Raises:
            InvalidImageError: If the upload is not an accepted image or the
                file exceeds the size limit.
        """
        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        if not content_type.startswith("image/"):
            raise InvalidImageError(INVALID_TYPE_MESSAGE)

        data = await upload.read(self.max_size_bytes + 1)
        if len(data) > self.max_size_bytes:
            msg = (
                "The image must not be greater than "
                f"{self.max_size_bytes // 1024} kilobytes"
            )
            raise InvalidImageError(msg)

        image_format = await asyncio.to_thread(_detect_format, data)
        extension = _FORMATS.get(image_format or "")
        if extension is None:
            logger.info(
                "Rejected upload that is not an accepted image",
                content_type=content_type,
                detected_format=image_format,
            )
            raise InvalidImageError(INVALID_TYPE_MESSAGE)

        relative_path = f"{IMAGE_PREFIX}/{uuid.uuid4().hex}{extension}"
        target = self.path_for(relative_path)
        await asyncio.to_thread(self._write, target, data)

        logger.info("Image stored", path=relative_path, size=len(data))
        return relative_path

    async def delete(self, relative_path: str | None) -> None:
        """Remove a stored image; missing files are ignored."""
        if not relative_path:
            return
        target = self.path_for(relative_path)
        await asyncio.to_thread(target.unlink, missing_ok=True)
        logger.debug("Image deleted", path=relative_path)

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
