"""Menu image storage"""

from abc import ABC, abstractmethod
from pathlib import Path
import secrets
import time

import structlog

from storefront.config import Settings, settings as default_settings
from storefront.errors import NotFoundError, ValidationError

logger = structlog.get_logger()

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
FOLDER = "menu-items"


def validate_image(content_type: str, size: int, max_bytes: int) -> None:
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(
            "Please upload a valid image file (JPEG, PNG, or WebP)",
            fields={"file": "Unsupported image type"},
        )
    if size > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise ValidationError(
            f"Image size must be less than {limit_mb}MB",
            fields={"file": f"Image size must be less than {limit_mb}MB"},
        )


def generate_path(filename: str) -> str:
    """menu-items/{millis}-{random}.{ext}"""
    ext = Path(filename or "").suffix.lstrip(".").lower() or "jpg"
    return f"{FOLDER}/{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}"


class ImageStorage(ABC):
    """Public object storage for menu images"""

    def __init__(self, base_url: str, bucket: str, max_bytes: int):
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self.max_bytes = max_bytes

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{self.bucket}/{path}"

    def path_from_url(self, url: str) -> str:
        """Object path after the bucket segment; URLs outside the bucket are rejected"""
        marker = f"/{self.bucket}/"
        if marker not in url:
            raise ValidationError("Image URL does not belong to menu image storage")
        path = url.split(marker, 1)[1].split("?", 1)[0]
        if not path or ".." in Path(path).parts:
            raise ValidationError("Image URL does not belong to menu image storage")
        return path

    def is_stored(self, url: str) -> bool:
        return bool(url) and url.startswith(self.base_url) and f"/{self.bucket}/" in url

    async def upload(self, filename: str, content_type: str, data: bytes) -> str:
        validate_image(content_type, len(data), self.max_bytes)
        path = generate_path(filename)
        await self._write(path, data)
        logger.info("Image uploaded", path=path, size=len(data))
        return self.public_url(path)

    async def delete(self, url: str) -> None:
        path = self.path_from_url(url)
        await self._remove(path)
        logger.info("Image deleted", path=path)

    @abstractmethod
    async def _write(self, path: str, data: bytes) -> None:
        pass

    @abstractmethod
    async def _remove(self, path: str) -> None:
        pass


class LocalImageStorage(ImageStorage):
    """Files under images_path/{bucket}, served at images_base_url/{bucket}"""

    def __init__(self, root: str, base_url: str, bucket: str, max_bytes: int):
        super().__init__(base_url, bucket, max_bytes)
        self.root = Path(root) / bucket

    async def _write(self, path: str, data: bytes) -> None:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    async def _remove(self, path: str) -> None:
        target = self.root / path
        if not target.exists():
            raise NotFoundError("Image not found")
        target.unlink()


def build_image_storage(config: Settings = default_settings) -> ImageStorage:
    if config.images_storage != "local":
        raise ValueError(f"Unknown image storage backend: {config.images_storage}")
    return LocalImageStorage(
        root=config.images_path,
        base_url=config.images_base_url,
        bucket=config.images_bucket,
        max_bytes=config.max_image_bytes,
    )
