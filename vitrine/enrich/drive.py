"""Google Drive preview enrichment."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from vitrine.config import DEFAULT_BATCH_SIZE
from vitrine.logic.artifact import Artifact
from vitrine.logic.nodes import ProductNode, iter_products
from vitrine.utils.dates import elapsed_label, iso_timestamp

logger = logging.getLogger(__name__)

DRIVE_API = "https://www.googleapis.com/drive/v3"
DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.readonly"]

FOLDER_ID_PATTERNS = (
    re.compile(r"/folders/([a-zA-Z0-9_-]+)"),
    re.compile(r"id=([a-zA-Z0-9_-]+)"),
    re.compile(r"/file/d/([a-zA-Z0-9_-]+)"),
)

PAUSE_EVERY = 10
PAUSE_SECONDS = 1.0

FETCH_ERRORS = (httpx.HTTPError, GoogleAuthError, ValueError)


def extract_folder_id(link: str | None) -> str | None:
    if not link:
        return None
    for pattern in FOLDER_ID_PATTERNS:
        match = pattern.search(link)
        if match:
            return match.group(1)
    return None


@dataclass(slots=True)
class DriveFile:
    id: str
    name: str
    mime_type: str
    size: str | None = None

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")

    def preview_file(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mimeType": self.mime_type,
            "preview": f"https://drive.google.com/uc?export=view&id={self.id}",
            "thumbnail": f"https://lh3.googleusercontent.com/d/{self.id}",
            "viewLink": f"https://drive.google.com/file/d/{self.id}/preview",
        }

    def image_entry(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mimeType": self.mime_type,
            "size": self.size,
            "type": "image",
            "thumbnailUrl": f"https://lh3.googleusercontent.com/d/{self.id}=s400",
            "viewUrl": f"https://lh3.googleusercontent.com/d/{self.id}=w2000",
            "driveUrl": f"https://drive.google.com/file/d/{self.id}/view",
            "directDownload": f"https://drive.google.com/uc?export=download&id={self.id}",
        }

    def video_entry(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mimeType": self.mime_type,
            "size": self.size,
            "type": "video",
            "driveUrl": f"https://drive.google.com/file/d/{self.id}/view",
            "directDownload": f"https://drive.google.com/uc?export=download&id={self.id}",
            "embedUrl": f"https://drive.google.com/file/d/{self.id}/preview",
        }


class DriveClient:
    """Minimal Drive v3 client authenticated with a service account.

    Pass ``token`` to skip credential minting (tests, pre-issued tokens).
    """

    def __init__(
        self,
        service_account_info: dict[str, Any] | None = None,
        *,
        token: str | None = None,
        session: httpx.AsyncClient | None = None,
    ) -> None:
        if service_account_info is None and token is None:
            raise ValueError("DriveClient needs service account info or a token")
        self._credentials = (
            service_account.Credentials.from_service_account_info(service_account_info, scopes=DRIVE_SCOPES)
            if service_account_info is not None
            else None
        )
        self._token = token
        self._session = session or httpx.AsyncClient(timeout=30.0)
        self.api_calls = 0

    async def close(self) -> None:
        await self._session.aclose()

    async def _access_token(self) -> str:
        if self._credentials is None:
            return self._token or ""
        if not self._credentials.valid:
            await asyncio.get_running_loop().run_in_executor(None, self._credentials.refresh, Request())
        return self._credentials.token

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        token = await self._access_token()
        self.api_calls += 1
        response = await self._session.get(
            f"{DRIVE_API}{path}", params=params, headers={"Authorization": f"Bearer {token}"}
        )
        response.raise_for_status()
        return response.json()

    async def whoami(self) -> str:
        data = await self._get("/about", {"fields": "user"})
        return (data.get("user") or {}).get("emailAddress", "")

    async def list_media(self, folder_id: str) -> list[DriveFile]:
        query = (
            f"'{folder_id}' in parents and trashed=false and "
            "(mimeType contains 'image/' or mimeType contains 'video/')"
        )
        data = await self._get(
            "/files",
            {
                "q": query,
                "fields": "files(id,name,mimeType,size)",
                "orderBy": "name",
                "pageSize": 1000,
                "supportsAllDrives": "true",
                "includeItemsFromAllDrives": "true",
            },
        )
        listing = (data.get("files") or []) if isinstance(data, dict) else None
        if not isinstance(listing, list):
            raise ValueError(f"Malformed Drive listing for folder {folder_id}")
        files = [
            DriveFile(id=f["id"], name=f.get("name") or "", mime_type=f.get("mimeType") or "", size=f.get("size"))
            for f in listing
            if isinstance(f, dict) and f.get("id")
        ]
        return [f for f in files if f.is_image or f.is_video]


class FolderListingCache:
    """Per-run memo of folder listings keyed by folder id.

    Concurrent lookups of the same id may both hit the API; the later result
    overwrites the earlier one with identical content. Failed lookups are not
    stored.
    """

    def __init__(self) -> None:
        self._data: dict[str, list[DriveFile]] = {}
        self.hits = 0

    def __len__(self) -> int:
        return len(self._data)

    async def get(self, folder_id: str, loader: Callable[[str], Awaitable[list[DriveFile]]]) -> list[DriveFile]:
        cached = self._data.get(folder_id)
        if cached is not None:
            self.hits += 1
            return cached
        files = await loader(folder_id)
        self._data[folder_id] = files
        return files


@dataclass(slots=True)
class PreviewStats:
    products_found: int = 0
    products_with_links: int = 0
    products_processed: int = 0
    total_images: int = 0
    total_videos: int = 0
    errors: list[dict[str, str]] = field(default_factory=list)
    started: float = field(default_factory=time.monotonic)


@dataclass(slots=True)
class PendingProduct:
    path: str
    node: ProductNode
    folder_id: str | None


class DrivePreviewEnricher:
    def __init__(
        self,
        client: DriveClient,
        *,
        cache: FolderListingCache | None = None,
        pause_seconds: float = PAUSE_SECONDS,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else FolderListingCache()
        self.pause_seconds = pause_seconds
        self.stats = PreviewStats()

    def collect(self, artifact: Artifact) -> list[PendingProduct]:
        pending: list[PendingProduct] = []
        for path, node in iter_products(artifact.tree):
            self.stats.products_found += 1
            if not node.drive_link:
                continue
            self.stats.products_with_links += 1
            pending.append(PendingProduct(path, node, extract_folder_id(node.drive_link)))
        return pending

    async def folder_media(self, folder_id: str) -> list[DriveFile]:
        """Listing for ``folder_id``; a failed fetch is logged and reads as empty."""
        try:
            return await self.cache.get(folder_id, self.client.list_media)
        except FETCH_ERRORS as exc:
            logger.error("Error fetching media for folder %s: %s", folder_id, exc)
            self.stats.errors.append({"folderId": folder_id, "error": str(exc)})
            return []

    async def enrich_sequential(self, artifact: Artifact) -> None:
        """Attach ``previewFiles`` one product at a time."""
        pending = [p for p in self.collect(artifact) if p.folder_id]
        logger.info("Found %s products with resolvable Drive links", len(pending))
        for index, product in enumerate(pending, start=1):
            files = await self.folder_media(product.folder_id)
            if files:
                product.node.preview_files = [f.preview_file() for f in files]
                self.stats.total_images += sum(1 for f in files if f.is_image)
                self.stats.total_videos += sum(1 for f in files if f.is_video)
                logger.info("[%s/%s] %s: %s files", index, len(pending), product.path, len(files))
            else:
                logger.info("[%s/%s] %s: no media", index, len(pending), product.path)
            self.stats.products_processed += 1
            if index % PAUSE_EVERY == 0 and self.pause_seconds:
                await asyncio.sleep(self.pause_seconds)
        self.stamp(artifact, mode="sequential")

    async def enrich_batched(self, artifact: Artifact, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        """Attach ``preview`` with fixed-size concurrent batches."""
        pending = self.collect(artifact)
        batches = [pending[i:i + batch_size] for i in range(0, len(pending), batch_size)]
        logger.info("Found %s products with Drive links, %s batches of %s", len(pending), len(batches), batch_size)
        for number, batch in enumerate(batches, start=1):
            results = await asyncio.gather(*(self._process(p) for p in batch), return_exceptions=True)
            for product, result in zip(batch, results):
                if isinstance(result, Exception):
                    logger.warning("%s: %s", product.path, result)
                    self.stats.errors.append({"path": product.path, "error": str(result)})
            successes = sum(1 for r in results if not isinstance(r, Exception))
            logger.info("Batch %s/%s: %s/%s successful", number, len(batches), successes, len(batch))
        self.stamp(artifact, mode="batched")

    async def _process(self, product: PendingProduct) -> None:
        if not product.folder_id:
            raise ValueError("Invalid Drive link")
        files = await self.folder_media(product.folder_id)
        images = [f for f in files if f.is_image]
        videos = sorted((f for f in files if f.is_video), key=lambda f: f.name)
        if not images and not videos:
            logger.info("%s: no media found", product.path)
            return
        product.node.preview = {
            "folderId": product.folder_id,
            "images": [f.image_entry() for f in images],
            "videos": [f.video_entry() for f in videos],
            "imageCount": len(images),
            "videoCount": len(videos),
            "totalMedia": len(images) + len(videos),
            "lastUpdated": iso_timestamp(),
            "folderUrl": f"https://drive.google.com/drive/folders/{product.folder_id}",
        }
        self.stats.products_processed += 1
        self.stats.total_images += len(images)
        self.stats.total_videos += len(videos)
        logger.info("%s: %s images + %s videos", product.path, len(images), len(videos))

    def stamp(self, artifact: Artifact, *, mode: str) -> dict[str, Any]:
        stats = self.stats
        build = {
            "timestamp": iso_timestamp(),
            "mode": mode,
            "productsFound": stats.products_found,
            "productsWithDriveLinks": stats.products_with_links,
            "productsProcessed": stats.products_processed,
            "totalImages": stats.total_images,
            "totalVideos": stats.total_videos,
            "totalMedia": stats.total_images + stats.total_videos,
            "apiCalls": self.client.api_calls,
            "cacheEntries": len(self.cache),
            "cacheHits": self.cache.hits,
            "errors": len(stats.errors),
            "buildTime": elapsed_label(stats.started),
        }
        artifact.meta["previewBuild"] = build
        return build
