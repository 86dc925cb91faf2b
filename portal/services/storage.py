"""
Local file storage for uploaded artifacts.

Resumes and cover letters go to UPLOAD_DIR/resumes, company logos to
UPLOAD_DIR/logos. Records only keep the stored filename; this module owns
the disk layout, extension checks and the upload size ceiling.
"""

import logging
import os
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from fastapi import UploadFile

from portal.config import settings
from portal.core.exceptions import ValidationError
from portal.utils.helpers import sanitize_filename
from portal.utils.validators import validate_file_extension

logger = logging.getLogger(__name__)

RESUME_FOLDER = "resumes"
LOGO_FOLDER = "logos"


class LocalUploadStorage:
    """Stores uploads under a base directory, one sub-folder per artifact kind."""

    def __init__(self, base_dir: Optional[str] = None, max_size: Optional[int] = None):
        self.base_dir = base_dir or settings.UPLOAD_DIR
        self.max_size = max_size or settings.MAX_UPLOAD_SIZE

    def _folder(self, kind: str) -> str:
        path = os.path.join(self.base_dir, kind)
        os.makedirs(path, exist_ok=True)
        return path

    def path_for(self, kind: str, filename: str) -> str:
        """Absolute path of a stored file."""
        return os.path.join(self.base_dir, kind, os.path.basename(filename))

    @staticmethod
    def _unique_name(original: str) -> str:
        stamp = datetime.utcnow().strftime("%Y%m%d%H%M%S")
        return f"{stamp}-{uuid4().hex[:8]}-{sanitize_filename(original)}"

    async def save(self, upload: UploadFile, kind: str, allowed_extensions: List[str]) -> str:
        """
        Validate and persist an upload.

        Args:
            upload: Incoming multipart file
            kind: Sub-folder (RESUME_FOLDER or LOGO_FOLDER)
            allowed_extensions: Accepted extensions without dots

        Returns:
            Stored filename (not the full path)

        Raises:
            ValidationError: Wrong extension or file larger than the limit
        """
        original = upload.filename or ""
        if not validate_file_extension(original, allowed_extensions):
            raise ValidationError(
                f"Invalid file type. Allowed: {', '.join(allowed_extensions)}"
            )

        content = await upload.read()
        if len(content) > self.max_size:
            raise ValidationError(
                f"File too large. Maximum size is {self.max_size // (1024 * 1024)}MB"
            )
        if not content:
            raise ValidationError("Uploaded file is empty")

        filename = self._unique_name(original)
        with open(os.path.join(self._folder(kind), filename), "wb") as f:
            f.write(content)

        logger.info(f"Stored upload {filename} ({len(content)} bytes) in {kind}")
        return filename

    async def save_resume(self, upload: UploadFile) -> str:
        return await self.save(upload, RESUME_FOLDER, settings.ALLOWED_UPLOAD_EXTENSIONS)

    async def save_logo(self, upload: UploadFile) -> str:
        return await self.save(upload, LOGO_FOLDER, settings.ALLOWED_LOGO_EXTENSIONS)

    def delete(self, kind: str, filename: Optional[str]) -> bool:
        """Remove a stored file. Missing files are not an error."""
        if not filename:
            return False
        path = self.path_for(kind, filename)
        if not os.path.exists(path):
            return False
        os.remove(path)
        logger.info(f"Deleted upload {filename} from {kind}")
        return True


_storage: Optional[LocalUploadStorage] = None


def get_storage() -> LocalUploadStorage:
    """Get the process-wide storage instance (FastAPI dependency)."""
    global _storage
    if _storage is None:
        _storage = LocalUploadStorage()
    return _storage
