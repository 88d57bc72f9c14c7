"""
Image hosting client.

Profile pictures are pushed to Cloudinary through its unsigned upload
endpoint: the image travels as a base64 data URI together with an upload
preset, and the host answers with a ``secure_url`` we store on the user.
"""
import base64
import logging
from typing import Optional

import httpx
from fastapi import Depends

from app.errors import UpstreamFailure
from config import Settings, get_settings

logger = logging.getLogger(__name__)

UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


class ImageUploader:
    def __init__(self, cloud_name: str, upload_preset: str, client: Optional[httpx.Client] = None):
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self._client = client

    def upload(self, data: bytes, mime_type: str) -> str:
        """Upload raw image bytes and return the public URL."""
        if not self.cloud_name:
            raise UpstreamFailure("Image hosting is not configured")

        payload = base64.b64encode(data).decode("ascii")
        form = {
            "file": f"data:{mime_type};base64,{payload}",
            "upload_preset": self.upload_preset,
        }
        url = UPLOAD_URL.format(cloud_name=self.cloud_name)
        try:
            if self._client is not None:
                response = self._client.post(url, data=form)
            else:
                with httpx.Client() as client:
                    response = client.post(url, data=form)
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Image upload failed: %s", exc)
            raise UpstreamFailure("Image upload failed")

        secure_url = result.get("secure_url") if isinstance(result, dict) else None
        if not secure_url:
            logger.error("Image host answered without a secure_url: %s", result)
            raise UpstreamFailure("Image upload failed")

        logger.info("Uploaded %d bytes of %s to image host", len(data), mime_type)
        return secure_url


def get_uploader(settings: Settings = Depends(get_settings)) -> ImageUploader:
    return ImageUploader(settings.cloudinary_cloud_name, settings.cloudinary_upload_preset)
