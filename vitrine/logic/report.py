"""Build-health report and step summary."""

from __future__ import annotations

import logging
import pathlib
from typing import Any

from vitrine.logic.catalog import BUILD_VERSION, CatalogBuild
from vitrine.logic.nodes import FolderNode, Node
from vitrine.utils.dates import iso_timestamp

logger = logging.getLogger(__name__)

SAMPLE_INVALID_LINKS = 5
SAMPLE_MISSING_THUMBS = 10
SAMPLE_WARNINGS = 5
SAMPLE_CATEGORIES = 10
UNORDERED = 999


def _items(node: Node) -> int:
    return node.count if isinstance(node, FolderNode) else 1


def _top_order(node: Node) -> int | None:
    return node.top_order if isinstance(node, FolderNode) else None


def build_health_report(build: CatalogBuild) -> dict[str, Any]:
    sections = build.sections()
    warnings = build.warnings
    return {
        "timestamp": iso_timestamp(),
        "build_version": BUILD_VERSION,
        "performance": {
            "totalBrands": len(build.brands.brands),
            "totalProducts": build.total_products,
            "totalCategories": len(build.tree),
            "catalogEntries": build.catalog_entries,
            "sectionsFound": len(sections),
        },
        "sections": {
            name: {"categories": s.categories, "totalItems": s.total_items} for name, s in sections.items()
        },
        "quality": {
            "invalidDriveLinks": len(build.tree_build.invalid_drive_links),
            "missingThumbnails": len(build.missing_thumbs),
            "warnings": len(warnings),
        },
        "details": {
            "invalidDriveLinks": [
                link.to_dict() for link in build.tree_build.invalid_drive_links[:SAMPLE_INVALID_LINKS]
            ],
            "missingThumbFiles": [m.to_dict() for m in build.missing_thumbs[:SAMPLE_MISSING_THUMBS]],
            "warnings": warnings[:SAMPLE_WARNINGS],
            "sectionsBreakdown": [
                {"section": name, "categories": s.categories, "totalItems": s.total_items}
                for name, s in sections.items()
            ],
            "sampleCategories": [
                {
                    "name": key,
                    "items": _items(node),
                    "section": node.section or "Featured",
                    "topOrder": _top_order(node) or UNORDERED,
                }
                for key, node in list(build.tree.items())[:SAMPLE_CATEGORIES]
            ],
        },
    }


def build_summary_markdown(build: CatalogBuild) -> str:
    sections = build.sections()
    warnings = build.warnings
    ordered = sorted(build.tree.items(), key=lambda item: _top_order(item[1]) or UNORDERED)
    lines = [
        "## Catalog Build Summary",
        "",
        "### Totals",
        f"- **Brands:** {len(build.brands.brands)}",
        f"- **Products:** {build.total_products}",
        f"- **Categories:** {len(build.tree)}",
        f"- **Sections:** {len(sections)}",
        f"- **Catalog entries processed:** {build.catalog_entries}",
        "",
        "### Sections",
        *(f"- **{name}:** {len(s.categories)} categories, {s.total_items} items" for name, s in sections.items()),
        "",
        "### Quality",
        f"- **Missing thumbnails:** {len(build.missing_thumbs)}",
        f"- **Invalid Drive links:** {len(build.tree_build.invalid_drive_links)}",
        f"- **Warnings:** {len(warnings)}" if warnings else "- No warnings",
        "",
        "### Categories",
        *(
            f"- **{key}** ({node.section or 'Featured'}): {_items(node)} items "
            f"[Order: {_top_order(node) or 'Auto'}]"
            for key, node in ordered
        ),
    ]
    return "\n".join(lines) + "\n"


def write_step_summary(path: pathlib.Path, summary: str) -> None:
    with path.open("a", encoding="utf-8") as handle:
        handle.write(summary)
    logger.info("Wrote step summary to %s", path)
