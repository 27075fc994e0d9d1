"""Catalog build job: source CSVs to ``data.json`` and ``health.json``."""

from __future__ import annotations

import asyncio
import logging
import sys

import httpx
from dotenv import load_dotenv

from vitrine.config import BuildSettings
from vitrine.errors import ConfigError
from vitrine.ingest.sources import CSVSource
from vitrine.logic.artifact import DATA_FILENAME, save_artifact, write_json
from vitrine.logic.catalog import CatalogBuild, build_catalog
from vitrine.logic.report import build_health_report, build_summary_markdown, write_step_summary
from vitrine.utils.logs import configure_logging

logger = logging.getLogger(__name__)

HEALTH_FILENAME = "health.json"


async def run_build(settings: BuildSettings, *, source: CSVSource | None = None) -> CatalogBuild:
    owns_source = source is None
    source = source or CSVSource()
    try:
        tables = await source.fetch_tables(settings.brands_csv_url, settings.master_csv_url)
    finally:
        if owns_source:
            await source.close()

    build = await build_catalog(
        tables.brands,
        tables.master,
        placeholder=settings.placeholder_thumb,
        public_dir=settings.public_dir,
    )
    for warning in build.warnings:
        logger.warning("%s", warning)

    save_artifact(settings.public_dir / DATA_FILENAME, build.to_artifact())
    write_json(settings.build_dir / HEALTH_FILENAME, build_health_report(build))

    summary = build_summary_markdown(build)
    logger.info("\n%s", summary)
    if settings.step_summary:
        write_step_summary(settings.step_summary, summary)
    return build


def main() -> None:
    load_dotenv()
    configure_logging()
    try:
        settings = BuildSettings.from_env()
    except ConfigError as exc:
        logger.error("%s", exc)
        sys.exit(1)
    try:
        build = asyncio.run(run_build(settings))
    except httpx.HTTPError as exc:
        logger.error("Failed to fetch CSVs: %s", exc)
        sys.exit(1)
    logger.info("Built catalog with %s products: %s", build.total_products, settings.public_dir / DATA_FILENAME)


if __name__ == "__main__":
    main()
