"""Inspect an existing ``data.json`` and log structural problems."""

from __future__ import annotations

import logging
import os
import pathlib
import sys
from dataclasses import dataclass, field

from dotenv import load_dotenv

from vitrine.config import DEFAULT_PUBLIC_DIR
from vitrine.errors import ArtifactError
from vitrine.logic.artifact import DATA_FILENAME, Artifact, load_artifact
from vitrine.logic.nodes import FolderNode, iter_nodes
from vitrine.utils.logs import configure_logging

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 10


@dataclass(slots=True)
class Inspection:
    brands: int
    total_products: int
    counted_products: int
    categories: list[str]
    total_nodes: int = 0
    missing_thumbnails: list[str] = field(default_factory=list)
    thumb_files: int | None = None

    @property
    def consistent(self) -> bool:
        return self.total_products == self.counted_products and not self.missing_thumbnails


def inspect_artifact(artifact: Artifact, public_dir: pathlib.Path) -> Inspection:
    result = Inspection(
        brands=len(artifact.brands),
        total_products=artifact.total_products,
        counted_products=sum(
            node.count if isinstance(node, FolderNode) else 1 for node in artifact.tree.values()
        ),
        categories=list(artifact.tree),
    )
    for segs, node in iter_nodes(artifact.tree):
        result.total_nodes += 1
        if not node.thumbnail:
            result.missing_thumbnails.append("/".join(segs))
    thumbs_dir = public_dir / "thumbs"
    if thumbs_dir.is_dir():
        result.thumb_files = sum(1 for p in thumbs_dir.rglob("*") if p.is_file())
    return result


def main() -> None:
    load_dotenv()
    configure_logging()
    public_dir = pathlib.Path(os.environ.get("PUBLIC_DIR", DEFAULT_PUBLIC_DIR))
    try:
        artifact = load_artifact(public_dir / DATA_FILENAME)
    except (ArtifactError, OSError) as exc:
        logger.error("%s", exc)
        sys.exit(1)

    result = inspect_artifact(artifact, public_dir)
    logger.info("Brands configured: %s", result.brands)
    logger.info("Total products: %s (tree counts %s)", result.total_products, result.counted_products)
    logger.info("Root categories: %s", ", ".join(result.categories))
    logger.info("Nodes: %s, without thumbnail: %s", result.total_nodes, len(result.missing_thumbnails))
    for path in result.missing_thumbnails[:SAMPLE_SIZE]:
        logger.info("  - %s", path)
    if result.thumb_files is None:
        logger.warning("No thumbs directory under %s", public_dir)
    else:
        logger.info("Files in thumbs: %s", result.thumb_files)
    if not result.consistent:
        sys.exit(1)


if __name__ == "__main__":
    main()
