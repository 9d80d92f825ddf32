import logging
import secrets
import time
from pathlib import Path

from realty.core.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif"}


class ImageStorage:
    """Cover image storage rooted at a directory served under ``public_base``."""

    def __init__(self, root: str | Path, public_base: str = "/storage", max_bytes: int = 5 * 1024 * 1024):
        self.root = Path(root)
        self.public_base = public_base.rstrip("/")
        self.max_bytes = max_bytes

    def _generate_name(self, extension: str) -> str:
        return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}.{extension}"

    def save(self, original_filename: str, content: bytes) -> str:
        extension = Path(original_filename or "").suffix.lstrip(".").lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise ValidationError(f"Unsupported image type: {extension or 'none'}")
        if not content:
            raise ValidationError("Image file is empty")
        if len(content) > self.max_bytes:
            raise ValidationError(f"Image exceeds {self.max_bytes} bytes")

        name = self._generate_name(extension)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / name).write_bytes(content)
        except OSError as exc:
            logger.exception("Failed to store image %s", name)
            raise StorageError("Failed to upload image.") from exc

        logger.info("Stored image %s (%d bytes)", name, len(content))
        return name

    def public_url(self, path: str) -> str:
        return f"{self.public_base}/{path.lstrip('/')}"
