"""Attach object-storage videos to products by catalog path."""

from __future__ import annotations

import logging
import posixpath
import re
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from vitrine.ingest.models import MirrorRow
from vitrine.logic.artifact import Artifact
from vitrine.logic.nodes import iter_products
from vitrine.logic.paths import match_key
from vitrine.utils.dates import elapsed_label, iso_timestamp

logger = logging.getLogger(__name__)

ROOT_SENTINEL = "root"
VIDEO_EXTENSIONS = (".mp4", ".webm", ".mov", ".avi", ".mkv", ".m4v")
NUMBERED_VIDEO_RE = re.compile(r"^video(\d*)\.")

VideoIndex = dict[str, list["VideoAsset"]]


@dataclass(slots=True)
class VideoAsset:
    key: str
    url: str

    @property
    def name(self) -> str:
        return posixpath.basename(self.key)

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "key": self.key, "url": self.url}


def is_video_key(key: str) -> bool:
    return key.lower().endswith(VIDEO_EXTENSIONS)


def video_sort_key(asset: VideoAsset) -> tuple[int, int, str]:
    """``video.mp4, video1.mp4, video2.mp4`` first, then by name."""
    name = asset.name.lower()
    match = NUMBERED_VIDEO_RE.match(name)
    if match:
        return (0, int(match.group(1) or 0), name)
    return (1, 0, name)


def _finish(index: Mapping[str, list[VideoAsset]]) -> VideoIndex:
    return {folder: sorted(assets, key=video_sort_key) for folder, assets in index.items()}


def load_mirror_index(records: Iterable[Mapping[str, str]], public_url: str) -> VideoIndex:
    """Map normalized folder paths to their mirrored videos.

    Only rows flagged as found are used; the ``root`` folder is never matched.
    """
    index: dict[str, list[VideoAsset]] = defaultdict(list)
    base = public_url.rstrip("/")
    for record in records:
        row = MirrorRow.from_record(record)
        if not row.found or not row.key or not is_video_key(row.key):
            continue
        folder = match_key(row.folder)
        if not folder or folder == ROOT_SENTINEL:
            continue
        key = row.key.replace("\\", "/").lstrip("/")
        index[folder].append(VideoAsset(key=key, url=f"{base}/{key}"))
    return _finish(index)


def load_bucket_index(client: Any, bucket: str, public_url: str) -> VideoIndex:
    """Same mapping built from a live S3-compatible bucket listing."""
    index: dict[str, list[VideoAsset]] = defaultdict(list)
    base = public_url.rstrip("/")
    paginator = client.get_paginator("list_objects_v2")
    for page in paginator.paginate(Bucket=bucket):
        for obj in page.get("Contents", []):
            key = obj["Key"]
            if not is_video_key(key):
                continue
            folder = match_key(posixpath.dirname(key))
            if not folder or folder == ROOT_SENTINEL:
                continue
            index[folder].append(VideoAsset(key=key, url=f"{base}/{key}"))
    return _finish(index)


@dataclass(slots=True)
class VideoStats:
    products_found: int = 0
    products_with_videos: int = 0
    total_videos: int = 0
    started: float = field(default_factory=time.monotonic)


def attach_videos(artifact: Artifact, index: Mapping[str, list[VideoAsset]]) -> VideoStats:
    stats = VideoStats()
    for path, node in iter_products(artifact.tree):
        stats.products_found += 1
        folder = match_key(path)
        videos = index.get(folder)
        if not videos:
            continue
        node.video_preview = {
            "videos": [v.to_dict() for v in videos],
            "videoCount": len(videos),
            "lastUpdated": iso_timestamp(),
            "folder": folder,
        }
        stats.products_with_videos += 1
        stats.total_videos += len(videos)
        logger.info("%s: %s video(s)", path, len(videos))
    return stats


def stamp_video_build(
    artifact: Artifact,
    stats: VideoStats,
    *,
    source: str,
    log_rows: int,
    indexed_folders: int,
    public_url: str,
) -> dict[str, Any]:
    build = {
        "timestamp": iso_timestamp(),
        "source": source,
        "logRows": log_rows,
        "indexedFolders": indexed_folders,
        "productsFound": stats.products_found,
        "productsWithVideos": stats.products_with_videos,
        "totalVideos": stats.total_videos,
        "publicUrl": public_url,
        "buildTime": elapsed_label(stats.started),
    }
    artifact.meta["videoBuild"] = build
    return build
