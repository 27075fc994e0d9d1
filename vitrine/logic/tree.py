"""Fold flat master rows into the nested catalog tree."""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from vitrine.ingest.models import CatalogRow
from vitrine.logic.nodes import FolderNode, ProductNode, Tree
from vitrine.logic.paths import norm_path, parent_prefixes, to_thumb_site_path

logger = logging.getLogger(__name__)

DRIVE_LINK_RE = re.compile(r"^https://drive\.google\.com/")
INT_RE = re.compile(r"^\s*[+-]?\d+")


@dataclass(slots=True)
class FolderMeta:
    thumbnail: str = ""
    drive_link: str = ""
    section: str = ""
    category: str = ""
    top_order: int | None = None


@dataclass(slots=True)
class InvalidDriveLink:
    name: str
    path: str
    drive_link: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "rel": self.path, "driveLink": self.drive_link}


@dataclass(slots=True)
class TreeBuild:
    tree: Tree = field(default_factory=dict)
    total_products: int = 0
    rows_seen: int = 0
    invalid_drive_links: list[InvalidDriveLink] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    section_stats: Counter = field(default_factory=Counter)


def parse_top_order(raw: str) -> int | None:
    """Leading integer of the cell, ``None`` when it does not start with one."""
    match = INT_RE.match(raw or "")
    if not match:
        return None
    return int(match.group(0))


def ensure_folder(tree: Tree, segs: Iterable[str]) -> Tree | None:
    """Walk/create folders along ``segs`` and return the children mapping.

    Returns ``None`` when a product already occupies part of the path.
    """
    children = tree
    for seg in segs:
        node = children.get(seg)
        if node is None:
            node = FolderNode()
            children[seg] = node
        if not isinstance(node, FolderNode):
            return None
        children = node.children
    return children


def collect_parent_paths(rows: Iterable[CatalogRow]) -> set[str]:
    parents: set[str] = set()
    for row in rows:
        parents.update(parent_prefixes(norm_path(row.path)))
    return parents


def build_tree(records: Iterable[Mapping[str, str]], placeholder: str) -> TreeBuild:
    """Build the catalog tree from master CSV records.

    A row with a drive link is a product only if no other row nests under its
    path; otherwise it contributes folder metadata that is attached once all
    rows are consumed, so row order never changes the tree shape.
    """
    rows = [CatalogRow.from_record(r) for r in records]
    parents = collect_parent_paths(rows)
    result = TreeBuild()
    folder_meta: dict[str, FolderMeta] = {}

    for row in rows:
        full = norm_path(row.path)
        if not full or not row.name:
            continue
        result.rows_seen += 1
        result.section_stats[row.section] += 1

        segs = full.split("/")
        is_candidate = bool(row.drive_link)
        is_leaf = is_candidate and full not in parents

        if is_candidate and not DRIVE_LINK_RE.match(row.drive_link):
            result.invalid_drive_links.append(InvalidDriveLink(row.name, full, row.drive_link))
            result.warnings.append(f"Drive link is not a drive.google.com URL: {full} ({row.name})")

        thumb = to_thumb_site_path(row.thumb)

        if is_leaf:
            children = ensure_folder(result.tree, segs[:-1])
            if children is None or row.name in children:
                result.warnings.append(f"Duplicate catalog path ignored: {full} ({row.name})")
                continue
            children[row.name] = ProductNode(
                drive_link=row.drive_link,
                thumbnail=thumb or placeholder,
                section=row.section,
                category=row.category,
            )
            result.total_products += 1
            continue

        if ensure_folder(result.tree, segs) is None:
            result.warnings.append(f"Folder row collides with a product: {full}")
            continue
        meta = folder_meta.setdefault(full, FolderMeta())
        if thumb:
            meta.thumbnail = thumb
        if row.drive_link:
            meta.drive_link = row.drive_link
        if row.section:
            meta.section = row.section
        if row.category:
            meta.category = row.category
        if len(segs) == 1:
            order = parse_top_order(row.top_order_raw)
            if order is not None:
                meta.top_order = order

    attach_folder_meta(result.tree, folder_meta)
    result.total_products += convert_empty_folders(result.tree)
    logger.info(
        "Built catalog tree: %s products across %s categories",
        result.total_products,
        len(result.tree),
    )
    logger.info("Sections found: %s", ", ".join(f"{name} ({rows})" for name, rows in result.section_stats.items()))
    return result


def attach_folder_meta(tree: Tree, folder_meta: Mapping[str, FolderMeta], prefix: str = "") -> None:
    for key, node in tree.items():
        if not isinstance(node, FolderNode):
            continue
        here = f"{prefix}/{key}" if prefix else key
        meta = folder_meta.get(here)
        if meta is not None:
            if meta.thumbnail:
                node.thumbnail = meta.thumbnail
            if meta.drive_link:
                node.drive_link = meta.drive_link
            if meta.section:
                node.section = meta.section
            if meta.category:
                node.category = meta.category
            if meta.top_order is not None:
                node.top_order = meta.top_order
        attach_folder_meta(node.children, folder_meta, here)


def convert_empty_folders(tree: Tree) -> int:
    """Turn childless folders that carry a drive link into products.

    Returns the number of conversions.
    """
    converted = 0
    for key, node in list(tree.items()):
        if not isinstance(node, FolderNode):
            continue
        if not node.children and node.drive_link:
            tree[key] = node.to_product()
            converted += 1
        elif node.children:
            converted += convert_empty_folders(node.children)
    return converted
