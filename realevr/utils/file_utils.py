"""
File upload utilities for image and tour archive validation and storage.
Uploads are streamed to disk in chunks so large tour archives never sit in memory.
"""

import shutil
import uuid
from pathlib import Path
from typing import Optional
from PIL import Image, UnidentifiedImageError
import aiofiles
from fastapi import UploadFile

from realevr.utils.exceptions import (
    FileSizeExceededError,
    FileUploadError,
    UnsupportedFileTypeError
)


class FileValidator:
    """Utility class for upload validation."""

    ZIP_MIME_TYPES = {
        "application/zip",
        "application/x-zip-compressed",
        "application/octet-stream",
    }

    # Pillow format name -> extension used for the stored file
    IMAGE_EXTENSIONS = {
        "JPEG": ".jpg",
        "PNG": ".png",
        "GIF": ".gif",
        "WEBP": ".webp",
        "BMP": ".bmp",
        "TIFF": ".tiff",
    }

    @classmethod
    def validate_image_upload(cls, file: UploadFile) -> None:
        """
        Check the declared type of an image upload.

        Raises:
            FileUploadError: If no file was sent
            UnsupportedFileTypeError: If the MIME type is not image/*
        """
        if file is None or not file.filename:
            raise FileUploadError("No image file provided")

        if not (file.content_type or "").startswith("image/"):
            raise UnsupportedFileTypeError("Only image files are allowed!")

    @classmethod
    def validate_image_content(cls, path: Path) -> str:
        """
        Verify that a stored file decodes as an image.

        Args:
            path: File written by the upload

        Returns:
            File extension matching the detected image format

        Raises:
            UnsupportedFileTypeError: If Pillow cannot identify the image
        """
        try:
            with Image.open(path) as img:
                image_format = img.format or ""
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise UnsupportedFileTypeError(f"Invalid image file: {e}")

        return cls.IMAGE_EXTENSIONS.get(image_format, f".{image_format.lower() or 'img'}")

    @classmethod
    def validate_tour_upload(cls, file: UploadFile) -> None:
        """
        Accept zip MIME types or any file named *.zip.

        Raises:
            FileUploadError: If no file was sent
            UnsupportedFileTypeError: If the upload is not a zip archive
        """
        if file is None or not file.filename:
            raise FileUploadError("No tour file provided")

        content_type = (file.content_type or "").lower()
        if content_type not in cls.ZIP_MIME_TYPES and not file.filename.lower().endswith(".zip"):
            raise UnsupportedFileTypeError("Not a zip file! Please upload a valid zip file.")


class FileStorage:
    """Utility class for storing uploads under a directory."""

    def __init__(self, base_dir: Path, chunk_size: int = 1024 * 1024):
        self.base_dir = Path(base_dir)
        self.chunk_size = chunk_size

    @staticmethod
    def generate_unique_name(extension: str = "") -> str:
        """Random 8 hex character name with an optional extension."""
        return f"{uuid.uuid4().hex[:8]}{extension}"

    async def save_upload(self, file: UploadFile, destination: Path, max_size: int) -> int:
        """
        Stream an upload to disk, enforcing a size limit.

        Args:
            file: UploadFile object
            destination: Path to write
            max_size: Maximum number of bytes accepted

        Returns:
            Number of bytes written

        Raises:
            FileSizeExceededError: If the upload is larger than max_size
        """
        destination.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        try:
            async with aiofiles.open(destination, "wb") as out:
                while True:
                    chunk = await file.read(self.chunk_size)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > max_size:
                        raise FileSizeExceededError()
                    await out.write(chunk)
        except BaseException:
            # Partial files are never kept
            destination.unlink(missing_ok=True)
            raise

        if written == 0:
            destination.unlink(missing_ok=True)
            raise FileUploadError("Uploaded file is empty")

        return written

    def resolve_public_path(self, public_url: Optional[str], prefix: str) -> Optional[Path]:
        """
        Map a public URL like /uploads/images/ab12cd34.png to a file under base_dir.
        Returns None for URLs outside prefix or paths escaping base_dir.
        """
        if not public_url or not public_url.startswith(prefix):
            return None
        candidate = (self.base_dir / public_url[len(prefix):].lstrip("/")).resolve()
        if not candidate.is_relative_to(self.base_dir.resolve()):
            return None
        return candidate

    @staticmethod
    def delete_file(path: Path) -> bool:
        """Delete a file, returning whether anything was removed."""
        if path.is_file():
            path.unlink()
            return True
        return False

    @staticmethod
    def delete_directory(path: Path) -> bool:
        """Delete a directory tree, returning whether anything was removed."""
        if path.is_dir():
            shutil.rmtree(path)
            return True
        return False
