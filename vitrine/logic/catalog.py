"""Catalog build pipeline: rows in, enriched tree and artifact out."""

from __future__ import annotations

import logging
import pathlib
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from vitrine import __version__
from vitrine.ingest.brands import BrandBuild, build_brands
from vitrine.logic.artifact import Artifact
from vitrine.logic.counts import MissingThumb, count_tree, scan_missing_thumbs
from vitrine.logic.nodes import FolderNode, Tree
from vitrine.logic.propagate import propagate_thumbnails
from vitrine.logic.tree import TreeBuild, build_tree
from vitrine.utils.dates import iso_timestamp

logger = logging.getLogger(__name__)

BUILD_VERSION = f"{__version__}-sections"
FEATURES = [
    "csv_driven_homepage",
    "dynamic_sections",
    "enhanced_branding",
    "section_based_organization",
]


@dataclass(slots=True)
class SectionSummary:
    categories: list[str] = field(default_factory=list)
    total_items: int = 0


@dataclass(slots=True)
class CatalogBuild:
    brands: BrandBuild
    tree_build: TreeBuild
    catalog_entries: int
    missing_thumbs: list[MissingThumb] = field(default_factory=list)

    @property
    def tree(self) -> Tree:
        return self.tree_build.tree

    @property
    def total_products(self) -> int:
        return self.tree_build.total_products

    @property
    def warnings(self) -> list[str]:
        return self.brands.warnings + self.tree_build.warnings

    def sections(self) -> dict[str, SectionSummary]:
        summary: dict[str, SectionSummary] = {}
        for key, node in self.tree.items():
            section = node.section or "Featured"
            entry = summary.setdefault(section, SectionSummary())
            entry.categories.append(key)
            entry.total_items += node.count if isinstance(node, FolderNode) else 1
        return summary

    def to_artifact(self) -> Artifact:
        sections = self.sections()
        return Artifact(
            brands=self.brands.to_dict(),
            tree=self.tree,
            total_products=self.total_products,
            catalog_extra={
                "sections": list(sections),
                "sectionStats": {name: s.total_items for name, s in sections.items()},
            },
            meta={
                "buildVersion": BUILD_VERSION,
                "buildTime": iso_timestamp(),
                "features": list(FEATURES),
            },
        )


def assemble_tree(master: Iterable[Mapping[str, str]], placeholder: str) -> TreeBuild:
    """Build, propagate and count the catalog tree."""
    result = build_tree(master, placeholder)
    propagate_thumbnails(result.tree, placeholder)
    counted = count_tree(result.tree)
    if counted != result.total_products:
        logger.warning("Tree holds %s products but %s were inserted", counted, result.total_products)
        result.total_products = counted
    return result


async def build_catalog(
    brand_records: list[dict[str, str]],
    master_records: list[dict[str, str]],
    *,
    placeholder: str,
    public_dir: pathlib.Path,
) -> CatalogBuild:
    brands = build_brands(brand_records)
    tree_build = assemble_tree(master_records, placeholder)
    missing = await scan_missing_thumbs(tree_build.tree, public_dir, placeholder)
    return CatalogBuild(
        brands=brands,
        tree_build=tree_build,
        catalog_entries=len(master_records),
        missing_thumbs=missing,
    )

