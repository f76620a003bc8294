"""Media Storage — Cloudinary uploads and deletions for listing, advert, blog and avatar images.

Invariants:
    - upload() returns {"url": secure_url, "public_id": public_id}
    - destroy() of an empty public_id is a no-op
    - SDK calls are blocking; they run in a worker thread (asyncio.to_thread)
    - SDK failures mapped to ExternalServiceError
"""

import asyncio
import io
import logging

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from app.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)


class CloudinaryStorage:
    """Cloudinary-backed MediaStorage."""

    def __init__(
        self, cloud_name: str, api_key: str, api_secret: str, folder: str,
    ):
        self.folder = folder
        self.config = cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    async def upload(self, data: bytes, folder: str | None = None) -> dict:
        target = f"{self.folder}/{folder}" if folder else self.folder
        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.upload, io.BytesIO(data), folder=target,
            )
        except CloudinaryError as e:
            logger.error(f"Cloudinary upload error: {e}")
            raise ExternalServiceError("Cloudinary", "upload failed")
        logger.info(
            "Cloudinary upload success", extra={"resource": result.get("public_id")},
        )
        return {"url": result["secure_url"], "public_id": result["public_id"]}

    async def destroy(self, public_id: str) -> None:
        if not public_id:
            return
        try:
            await asyncio.to_thread(cloudinary.uploader.destroy, public_id)
        except CloudinaryError as e:
            logger.error(f"Cloudinary destroy error: {e}")
            raise ExternalServiceError("Cloudinary", "destroy failed")
