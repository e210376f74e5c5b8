from fastapi import HTTPException, UploadFile
from pathlib import Path
import cloudinary
import cloudinary.uploader
import logging
import random
import time
import config

logger = logging.getLogger(__name__)


def build_upload_filename(field_name: str, original_name: str) -> str:
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    extension = Path(original_name or "").suffix
    return f"{field_name}-{unique_suffix}{extension}"


async def save_image_upload(upload: UploadFile, field_name: str = "image") -> Path:
    if not upload.content_type or not upload.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Not an image! Please upload an image.")

    contents = await upload.read(config.MAX_UPLOAD_SIZE + 1)
    if len(contents) > config.MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=413, detail="Image exceeds the maximum upload size")

    uploads_dir = Path(config.UPLOAD_DIR)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    image_path = uploads_dir / build_upload_filename(field_name, upload.filename)
    image_path.write_bytes(contents)
    return image_path


def upload_to_cloudinary(image_path: Path) -> str:
    cloudinary.config(
        cloud_name=config.CLOUDINARY_CLOUD_NAME,
        api_key=config.CLOUDINARY_API_KEY,
        api_secret=config.CLOUDINARY_API_SECRET,
    )
    upload_result = cloudinary.uploader.upload(str(image_path), resource_type="image")
    return upload_result["secure_url"]


async def store_image(upload: UploadFile, field_name: str = "image") -> str:
    """Stage an uploaded image on disk, push it to Cloudinary and return its hosted URL.

    The local copy is removed whether or not the upload succeeds.
    """
    image_path = await save_image_upload(upload, field_name)
    try:
        return upload_to_cloudinary(image_path)
    except Exception as e:
        logger.error(f"Cloudinary upload failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to upload image")
    finally:
        try:
            image_path.unlink()
        except OSError as e:
            logger.error(f"Error deleting local file {image_path}: {str(e)}")
