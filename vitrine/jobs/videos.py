"""Video job: match mirrored videos to catalog products by path."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

import boto3
import httpx
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

from vitrine.config import VideoSettings
from vitrine.enrich.videos import VideoIndex, attach_videos, load_bucket_index, load_mirror_index, stamp_video_build
from vitrine.errors import ConfigError
from vitrine.ingest.sources import CSVSource
from vitrine.logic.artifact import DATA_FILENAME, load_artifact, save_artifact
from vitrine.utils.logs import configure_logging

logger = logging.getLogger(__name__)


def r2_client(settings: VideoSettings) -> Any:
    session = boto3.session.Session()
    return session.client(
        "s3",
        region_name="auto",
        endpoint_url=settings.endpoint_url,
        aws_access_key_id=settings.access_key_id,
        aws_secret_access_key=settings.secret_access_key,
    )


async def load_index(settings: VideoSettings, *, source: CSVSource | None = None) -> tuple[VideoIndex, int]:
    """Video index plus the number of source rows/objects it was built from."""
    if settings.source == "bucket":
        client = r2_client(settings)
        index = await asyncio.get_running_loop().run_in_executor(
            None, load_bucket_index, client, settings.bucket, settings.public_url
        )
        return index, sum(len(v) for v in index.values())

    owns_source = source is None
    source = source or CSVSource()
    try:
        records = await source.fetch_records(settings.mirror_log_url)
    finally:
        if owns_source:
            await source.close()
    logger.info("Loaded %s mirror log rows", len(records))
    return load_mirror_index(records, settings.public_url), len(records)


async def run_videos(settings: VideoSettings, *, source: CSVSource | None = None) -> dict[str, Any]:
    data_path = settings.public_dir / DATA_FILENAME
    artifact = load_artifact(data_path)
    index, rows = await load_index(settings, source=source)
    logger.info("Indexed videos for %s folders", len(index))

    stats = attach_videos(artifact, index)
    build = stamp_video_build(
        artifact,
        stats,
        source=settings.source,
        log_rows=rows,
        indexed_folders=len(index),
        public_url=settings.public_url,
    )
    save_artifact(data_path, artifact)
    logger.info(
        "Video build: %s/%s products with videos, %s videos in %s",
        stats.products_with_videos,
        stats.products_found,
        stats.total_videos,
        build["buildTime"],
    )
    return build


def main() -> None:
    load_dotenv()
    configure_logging()
    try:
        settings = VideoSettings.from_env()
        asyncio.run(run_videos(settings))
    except (ConfigError, ValueError, OSError, httpx.HTTPError, BotoCoreError, ClientError) as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
