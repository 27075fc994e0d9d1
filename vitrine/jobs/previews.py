"""Drive preview job: embed folder media into ``data.json`` products."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

import httpx
from dotenv import load_dotenv
from google.auth.exceptions import GoogleAuthError

from vitrine.config import PreviewSettings
from vitrine.enrich.drive import DriveClient, DrivePreviewEnricher
from vitrine.errors import ConfigError
from vitrine.logic.artifact import DATA_FILENAME, load_artifact, save_artifact
from vitrine.utils.logs import configure_logging

logger = logging.getLogger(__name__)


async def run_previews(settings: PreviewSettings, *, client: DriveClient | None = None) -> dict[str, Any]:
    data_path = settings.public_dir / DATA_FILENAME
    artifact = load_artifact(data_path)
    owns_client = client is None
    client = client or DriveClient(settings.service_account)
    enricher = DrivePreviewEnricher(client)
    try:
        account = await client.whoami()
        logger.info("Connected to Drive as %s", account or "<unknown>")
        if settings.mode == "sequential":
            await enricher.enrich_sequential(artifact)
        else:
            await enricher.enrich_batched(artifact, settings.batch_size)
    finally:
        if owns_client:
            await client.close()

    save_artifact(data_path, artifact)
    build = artifact.meta["previewBuild"]
    logger.info(
        "Preview build: %s processed, %s images, %s videos, %s API calls, %s errors in %s",
        build["productsProcessed"],
        build["totalImages"],
        build["totalVideos"],
        build["apiCalls"],
        build["errors"],
        build["buildTime"],
    )
    for error in enricher.stats.errors:
        logger.warning("  %s", error)
    return build


def main() -> None:
    load_dotenv()
    configure_logging()
    try:
        settings = PreviewSettings.from_env()
        asyncio.run(run_previews(settings))
    except (ConfigError, ValueError, OSError, GoogleAuthError, httpx.HTTPError) as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
