"""Item counts and thumbnail file checks."""

from __future__ import annotations

import asyncio
import logging
import pathlib
from dataclasses import dataclass

from vitrine.logic.nodes import FolderNode, Node, Tree, iter_nodes

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MissingThumb:
    path: str
    thumbnail: str
    section: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "thumbnail": self.thumbnail, "section": self.section}


def set_counts(node: Node) -> int:
    if not isinstance(node, FolderNode):
        return 1
    node.count = sum(set_counts(child) for child in node.children.values())
    return node.count


def count_tree(tree: Tree) -> int:
    """Set every folder count and return the number of products in ``tree``."""
    return sum(set_counts(node) for node in tree.values())


def thumb_file(public_dir: pathlib.Path, thumbnail: str) -> pathlib.Path:
    return public_dir / thumbnail.lstrip("/")


async def scan_missing_thumbs(tree: Tree, public_dir: pathlib.Path, placeholder: str) -> list[MissingThumb]:
    """Report nodes whose thumbnail file is absent under ``public_dir``."""
    checks: list[tuple[str, Node]] = [
        ("/".join(segs), node)
        for segs, node in iter_nodes(tree)
        if node.thumbnail and node.thumbnail != placeholder
    ]
    loop = asyncio.get_running_loop()
    exists = await asyncio.gather(
        *(loop.run_in_executor(None, thumb_file(public_dir, node.thumbnail).is_file) for _, node in checks)
    )
    missing = [
        MissingThumb(path=path, thumbnail=node.thumbnail, section=node.section or "Unknown")
        for (path, node), found in zip(checks, exists)
        if not found
    ]
    if missing:
        logger.warning("%s thumbnails point at missing files", len(missing))
    return missing
