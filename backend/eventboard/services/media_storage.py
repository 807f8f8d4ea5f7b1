# eventboard/services/media_storage.py
"""Hosted media storage.

Files are forwarded to a Cloudinary compatible REST API and referenced
afterwards only by (public_id, secure_url). Photos and videos go through
separate endpoints because the host keeps the two asset kinds apart.
"""
import asyncio
import hashlib
import logging
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Tuple

import httpx
from fastapi import UploadFile

from eventboard.core.config import settings
from eventboard.core.exceptions import MediaDeleteError, MediaUploadError, ValidationError
from eventboard.models.media import MediaAsset, MediaKind

logger = logging.getLogger(__name__)

RESOURCE_TYPES = {
    MediaKind.PHOTO: "image",
    MediaKind.VIDEO: "video",
}


class MediaStorage(ABC):
    @abstractmethod
    async def upload(self, file: UploadFile, kind: MediaKind) -> MediaAsset:
        """Upload one file, raising MediaUploadError on any failure"""
        ...

    @abstractmethod
    async def delete(self, public_id: str, kind: MediaKind) -> None:
        """Delete an asset. An asset that is already gone counts as deleted."""
        ...

    async def close(self) -> None:
        pass


class CloudinaryStorage(MediaStorage):
    def __init__(
        self,
        base_url: str,
        api_key: str,
        api_secret: str,
        folder: str,
        timeout: float = 60,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.client = client or httpx.AsyncClient(timeout=timeout)

    def sign(self, params: Dict[str, str]) -> str:
        """SHA-1 over the sorted parameters followed by the API secret"""
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode("utf-8")).hexdigest()

    def _signed(self, params: Dict[str, str]) -> Dict[str, str]:
        params = {**params, "timestamp": str(int(time.time()))}
        return {**params, "signature": self.sign(params), "api_key": self.api_key}

    async def upload(self, file: UploadFile, kind: MediaKind) -> MediaAsset:
        url = f"{self.base_url}/{RESOURCE_TYPES[kind]}/upload"
        data = self._signed({"folder": self.folder})
        try:
            # httpx streams the spooled file in chunks
            await file.seek(0)
            response = await self.client.post(
                url,
                data=data,
                files={"file": (file.filename or "upload", file.file, file.content_type)},
            )
            response.raise_for_status()
            body = response.json()
            asset = MediaAsset(public_id=body["public_id"], url=body["secure_url"], kind=kind)
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning(f"Upload of {file.filename} failed: {e}")
            raise MediaUploadError(f"Could not upload {file.filename}")

        logger.info(f"Uploaded {kind.value} {asset.public_id}")
        return asset

    async def delete(self, public_id: str, kind: MediaKind) -> None:
        url = f"{self.base_url}/{RESOURCE_TYPES[kind]}/destroy"
        data = self._signed({"public_id": public_id})
        try:
            response = await self.client.post(url, data=data)
            response.raise_for_status()
            result = response.json().get("result")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Deletion of {kind.value} {public_id} failed: {e}")
            raise MediaDeleteError(f"Could not delete {public_id}")

        if result not in ("ok", "not found"):
            raise MediaDeleteError(f"Could not delete {public_id}: {result}")
        logger.info(f"Deleted {kind.value} {public_id} ({result})")

    async def close(self) -> None:
        await self.client.aclose()


@lru_cache()
def get_media_storage() -> MediaStorage:
    """Process wide storage client, overridden in tests"""
    return CloudinaryStorage(
        base_url=settings.media.upload_base_url,
        api_key=settings.media.CLOUDINARY_API_KEY,
        api_secret=settings.media.CLOUDINARY_API_SECRET.get_secret_value(),
        folder=settings.media.MEDIA_FOLDER,
        timeout=settings.media.MEDIA_TIMEOUT,
    )


def classify_media(content_type: Optional[str]) -> MediaKind:
    """Photo or video, decided by the declared content type only"""
    content_type = (content_type or "").lower()
    if content_type.startswith("image/"):
        return MediaKind.PHOTO
    if content_type.startswith("video/"):
        return MediaKind.VIDEO
    raise ValidationError(f"Unsupported media type: {content_type or 'unknown'}")


async def upload_files(storage: MediaStorage, files: List[UploadFile]) -> List[MediaAsset]:
    """Upload every file concurrently and wait for all of them.

    If any upload fails the ones that succeeded are deleted again and
    MediaUploadError is raised, so nothing half-uploaded is left behind.
    """
    if not files:
        return []
    kinds = [classify_media(f.content_type) for f in files]

    results = await asyncio.gather(
        *(storage.upload(f, kind) for f, kind in zip(files, kinds)),
        return_exceptions=True,
    )
    assets = [r for r in results if isinstance(r, MediaAsset)]
    errors = [r for r in results if isinstance(r, BaseException)]
    for error in errors:
        if isinstance(error, asyncio.CancelledError):
            raise error
    if errors:
        await delete_assets(storage, [(a.public_id, a.kind) for a in assets])
        error = errors[0]
        if isinstance(error, MediaUploadError):
            raise error
        logger.error(f"Unexpected upload failure: {error!r}")
        raise MediaUploadError() from error
    return assets


async def delete_assets(storage: MediaStorage, assets: Iterable[Tuple[str, MediaKind]]) -> List[str]:
    """Best effort delete of every asset. Returns the ids that could not be deleted."""
    assets = list(assets)
    results = await asyncio.gather(
        *(storage.delete(public_id, kind) for public_id, kind in assets),
        return_exceptions=True,
    )
    failed = []
    for (public_id, kind), result in zip(assets, results):
        if isinstance(result, BaseException):
            logger.warning(f"Could not delete {kind.value} {public_id}: {result}")
            failed.append(public_id)
    return failed
