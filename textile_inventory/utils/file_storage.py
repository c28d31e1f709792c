import os
import time
import uuid
from pathlib import Path
from typing import Optional
from loguru import logger

from textile_inventory.core.config import settings
from textile_inventory.core.exceptions import AssetError


# Define storage location (using Path for OS agnostic handling)
MATERIAL_IMG_DIR = Path(settings.static_dir) / "materials"
STATIC_URL_PREFIX = "/static/materials"

# Allowed image formats for material photos
ALLOWED_IMAGE_EXTENSIONS = {"jpeg", "jpg", "png", "webp"}
ALLOWED_IMAGE_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


def validate_image_file(filename: str, size: int, content_type: Optional[str] = None,
                        max_size: Optional[int] = None) -> str:
    """
    Validates an uploaded material image and returns its normalized extension.
    Raises AssetError if the name, type or size is not acceptable.
    """
    if not filename:
        raise AssetError("Filename is required for image uploads.")

    # Extract extension (case-insensitive)
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""

    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise AssetError(
            "Only image files are allowed! Allowed extensions: " +
            ", ".join(sorted(ALLOWED_IMAGE_EXTENSIONS))
        )

    if content_type and content_type.lower() not in ALLOWED_IMAGE_CONTENT_TYPES:
        raise AssetError(f"Content type '{content_type}' is not an allowed image type.")

    limit = max_size if max_size is not None else settings.max_image_size
    if size > limit:
        raise AssetError(f"Image exceeds the {limit // (1024 * 1024)}MB size limit.")

    if size == 0:
        raise AssetError("Image file is empty.")

    return ext


class LocalAssetStorage:
    """
    Stores material images in the static directory and hands back the
    web path the record keeps in its `image` field.
    """

    def __init__(self, directory: Path = MATERIAL_IMG_DIR, url_prefix: str = STATIC_URL_PREFIX,
                 max_size: Optional[int] = None):
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_size = max_size

    def _path_for(self, asset_ref: str) -> Path:
        if not asset_ref.startswith(self.url_prefix + "/"):
            raise AssetError(f"Asset '{asset_ref}' is not managed by this storage.")

        name = asset_ref[len(self.url_prefix) + 1:]
        # Refuse anything that would escape the storage directory
        if not name or name != os.path.basename(name) or name in (".", ".."):
            raise AssetError(f"Invalid asset reference '{asset_ref}'.")
        return self.directory / name

    def store(self, content: bytes, suggested_name: str, content_type: Optional[str] = None) -> str:
        ext = validate_image_file(
            suggested_name, len(content), content_type, self.max_size)

        # 1. Ensure directory exists
        os.makedirs(self.directory, exist_ok=True)

        # 2. Generate unique filename
        filename = f"material-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.{ext}"
        file_path = self.directory / filename

        try:
            # 3. Write binary content
            with open(file_path, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Error saving image {filename}: {e}")
            raise AssetError(f"Could not store image: {e}") from e

        # 4. Return web-accessible path
        return f"{self.url_prefix}/{filename}"

    def remove(self, asset_ref: str) -> None:
        """Deletes a stored asset. An asset that is already gone counts as removed."""
        file_path = self._path_for(asset_ref)
        try:
            file_path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Error removing image {asset_ref}: {e}")
            raise AssetError(f"Could not remove image: {e}") from e
