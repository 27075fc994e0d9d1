"""Brand table processing."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from vitrine.ingest.models import BrandRow

logger = logging.getLogger(__name__)

HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
WHATSAPP_RE = re.compile(r"^https://wa\.me/\d+$")

DEFAULT_CATEGORY = "BAGS"

# (attribute, label, fallback, fallback description)
PALETTE = (
    ("primary", "primaryColor", "#D4AF37", "gold"),
    ("accent", "accentColor", "#8B5CF6", "purple"),
    ("text", "textColor", "#202124", "dark"),
    ("bg", "bgColor", "#FFFFFF", "white"),
)


@dataclass(slots=True)
class Brand:
    slug: str
    name: str
    colors: dict[str, str]
    default_category: str
    whatsapp: str | None = None
    tagline: str = ""
    hero_title: str = ""
    hero_subtitle: str = ""
    footer_text: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "tagline": self.tagline,
            "heroTitle": self.hero_title,
            "heroSubtitle": self.hero_subtitle,
            "footerText": self.footer_text,
            "colors": dict(self.colors),
        }
        if self.whatsapp:
            data["whatsapp"] = self.whatsapp
        data["defaultCategory"] = self.default_category
        return data


@dataclass(slots=True)
class BrandBuild:
    brands: dict[str, Brand] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {slug: brand.to_dict() for slug, brand in self.brands.items()}


def build_brands(records: Iterable[Mapping[str, str]]) -> BrandBuild:
    """Validate brand rows into brands keyed by slug; the first slug wins."""
    result = BrandBuild()
    for record in records:
        row = BrandRow.from_record(record)
        if not row.slug and not row.name:
            continue
        if not row.slug or not row.name:
            result.warnings.append(f"Brand row skipped (needs both slug & name): {dict(record)}")
            continue

        colors: dict[str, str] = {}
        for attr, label, fallback, description in PALETTE:
            value = getattr(row, attr)
            if HEX_COLOR_RE.match(value):
                colors[attr] = value
                continue
            if value:
                result.warnings.append(
                    f'Brand {row.slug}: invalid {label} "{value}" -> {description} {fallback} used'
                )
            colors[attr] = fallback

        whatsapp = row.whatsapp if WHATSAPP_RE.match(row.whatsapp) else None
        if row.whatsapp and not whatsapp:
            result.warnings.append(f"Brand {row.slug}: WhatsApp is not wa.me/* -> ignored")

        if row.slug in result.brands:
            result.warnings.append(f"Duplicate brand slug ignored: {row.slug}")
            continue

        result.brands[row.slug] = Brand(
            slug=row.slug,
            name=row.name,
            colors=colors,
            default_category=row.default_category or DEFAULT_CATEGORY,
            whatsapp=whatsapp,
            tagline=row.tagline,
            hero_title=row.hero_title,
            hero_subtitle=row.hero_subtitle,
            footer_text=row.footer_text,
        )
    logger.info("Processed %s brands (%s warnings)", len(result.brands), len(result.warnings))
    return result
