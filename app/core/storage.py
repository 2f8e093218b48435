import os
import re
import uuid
import logging
from typing import Optional
from fastapi import UploadFile

from .config import settings
from .errors import InvalidImage

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads/"
# Names produced by save(): 32 hex chars plus the original extension
SAVED_NAME_PATTERN = re.compile(r"[0-9a-f]{32}\.[a-z0-9]+")

class ImageStorage:
    """Stores uploaded meme images on local disk, served under /uploads"""

    def __init__(self, directory: str = None, max_size: int = None, allowed_extensions=None):
        self.directory = directory or settings.UPLOAD_DIRECTORY
        self.max_size = max_size or settings.MAX_UPLOAD_SIZE
        self.allowed_extensions = allowed_extensions or settings.ALLOWED_IMAGE_EXTENSIONS

    def check_extension(self, filename: str) -> str:
        file_extension = os.path.splitext(filename or "")[1].lower()
        if file_extension not in self.allowed_extensions:
            raise InvalidImage(
                f"Unsupported file format. Please use one of: {', '.join(self.allowed_extensions)}"
            )
        return file_extension

    async def save(self, file: UploadFile) -> str:
        """Write the upload to disk and return its public path"""
        logger.info(f"[UPLOAD] Received file: {file.filename}")
        file_extension = self.check_extension(file.filename)

        content = await file.read()
        if len(content) > self.max_size:
            raise InvalidImage(f"Image must be {self.max_size // (1024 * 1024)} MB or less")

        os.makedirs(self.directory, exist_ok=True)
        unique_filename = f"{uuid.uuid4().hex}{file_extension}"
        local_path = os.path.join(self.directory, unique_filename)
        with open(local_path, "wb") as out_file:
            out_file.write(content)
        await file.seek(0)

        logger.info(f"[UPLOAD] Saved file locally at {local_path}")
        return f"{UPLOAD_URL_PREFIX}{unique_filename}"

    def local_path(self, image_url: str) -> Optional[str]:
        """Map a URL returned by save() to its file, or None for anything else"""
        if not image_url or not image_url.startswith(UPLOAD_URL_PREFIX):
            return None
        filename = image_url[len(UPLOAD_URL_PREFIX):]
        if not SAVED_NAME_PATTERN.fullmatch(filename):
            return None

        directory = os.path.realpath(self.directory)
        local_path = os.path.realpath(os.path.join(directory, filename))
        if os.path.dirname(local_path) != directory:
            return None
        return local_path

    def delete(self, image_url: str) -> bool:
        """Remove a previously saved upload; external and foreign paths are left alone"""
        local_path = self.local_path(image_url)
        if local_path is None:
            if image_url and image_url.startswith(UPLOAD_URL_PREFIX):
                logger.warning(f"Refusing to delete {image_url!r}: not a saved upload")
            return False
        try:
            os.remove(local_path)
        except FileNotFoundError:
            logger.warning(f"Upload {local_path} already gone")
            return False
        logger.info(f"Deleted upload {local_path}")
        return True

# Global instance for app-wide usage
image_storage = ImageStorage()
