"""
Image upload handling for post images and user avatars.

Files are checked in memory (declared content type, extension and size)
before anything touches the disk, so a rejected upload never leaves a file
behind. Callers wrap the rest of their work in :func:`UploadService.stored`
so that a stored file is removed again if anything later fails.
"""

import secrets
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from fastapi import UploadFile
from loguru import logger

from models.config import settings
from models.exceptions import InvalidUploadException

PUBLIC_PREFIX = "/uploads"


@dataclass(frozen=True)
class UploadPolicy:
    content_types: frozenset[str]
    extensions: frozenset[str]
    subdir: str
    filename_prefix: str
    error_message: str


class UploadKind(Enum):
    POST_IMAGE = UploadPolicy(
        content_types=frozenset({"image/jpeg", "image/jpg", "image/png", "image/gif"}),
        extensions=frozenset({".jpeg", ".jpg", ".png", ".gif"}),
        subdir="",
        filename_prefix="",
        error_message="Only image files (jpeg, jpg, png, gif) are allowed!",
    )
    AVATAR = UploadPolicy(
        content_types=frozenset({"image/jpeg", "image/jpg", "image/png"}),
        extensions=frozenset({".jpeg", ".jpg", ".png"}),
        subdir="avatars",
        filename_prefix="avatar-",
        error_message="Only image files (jpeg, jpg, png) are allowed!",
    )


@dataclass(frozen=True)
class StoredFile:
    path: Path
    public_path: str


def upload_root() -> Path:
    return Path(settings.UPLOAD_DIR)


class UploadService:
    """Validate, store and delete uploaded image files."""

    @staticmethod
    def read_validated(upload: UploadFile, kind: UploadKind) -> tuple[bytes, str]:
        """
        Read an upload into memory and check it against ``kind``'s policy.

        Args:
            upload: Incoming multipart file
            kind: Which policy applies

        Returns:
            Tuple of (file content, lowercased extension)

        Raises:
            InvalidUploadException: Wrong content type or extension, or too large
        """
        policy = kind.value
        extension = Path(upload.filename or "").suffix.lower()
        content_type = (upload.content_type or "").lower()

        if content_type not in policy.content_types or extension not in policy.extensions:
            raise InvalidUploadException(policy.error_message)

        # Read one byte past the cap so oversize files are detected without
        # loading arbitrarily large bodies
        content = upload.file.read(settings.MAX_UPLOAD_SIZE_BYTES + 1)
        if len(content) > settings.MAX_UPLOAD_SIZE_BYTES:
            raise InvalidUploadException("File upload error: File too large")

        return content, extension

    @staticmethod
    def save(upload: UploadFile, kind: UploadKind) -> StoredFile:
        """
        Validate then write an upload under ``UPLOAD_DIR``.

        Returns:
            Where the file was written and the public URL path for it
        """
        content, extension = UploadService.read_validated(upload, kind)
        policy = kind.value

        filename = (
            f"{policy.filename_prefix}{int(time.time() * 1000)}"
            f"-{secrets.randbelow(10**9)}{extension}"
        )
        directory = upload_root() / policy.subdir if policy.subdir else upload_root()
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_bytes(content)

        public_path = "/".join(
            part for part in (PUBLIC_PREFIX, policy.subdir, filename) if part
        )
        logger.info(f"Stored upload {public_path} ({len(content)} bytes)")
        return StoredFile(path=path, public_path=public_path)

    @staticmethod
    def delete_file(path: Path) -> None:
        """Remove a stored file. Failures are logged, never raised."""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to delete uploaded file {path}: {e}")

    @staticmethod
    def delete_public_path(public_path: str | None) -> None:
        """Remove a previously stored file given its ``/uploads/...`` path."""
        if not public_path or not public_path.startswith(PUBLIC_PREFIX + "/"):
            return

        root = upload_root().resolve()
        path = (root / public_path[len(PUBLIC_PREFIX) + 1 :]).resolve()
        if root not in path.parents:
            logger.warning(f"Refusing to delete file outside upload dir: {public_path}")
            return
        UploadService.delete_file(path)

    @staticmethod
    @contextmanager
    def stored(upload: UploadFile | None, kind: UploadKind) -> Iterator[StoredFile | None]:
        """
        Store ``upload`` (if any) for the duration of a block.

        If the block raises, the stored file is deleted before the exception
        propagates.

        Usage:
            with UploadService.stored(image, UploadKind.POST_IMAGE) as stored:
                ...
        """
        if upload is None or not upload.filename:
            yield None
            return

        stored_file = UploadService.save(upload, kind)
        try:
            yield stored_file
        except BaseException:
            UploadService.delete_file(stored_file.path)
            raise
