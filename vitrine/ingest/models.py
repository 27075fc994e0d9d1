"""Typed rows read from the source spreadsheets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

DEFAULT_SECTION = "Featured"


def pick(record: Mapping[str, str], *columns: str) -> str:
    """First non-empty cell among column aliases."""
    for column in columns:
        value = (record.get(column) or "").strip()
        if value:
            return value
    return ""


@dataclass(slots=True)
class CatalogRow:
    name: str
    path: str
    drive_link: str
    thumb: str
    top_order_raw: str
    section: str
    category: str

    @classmethod
    def from_record(cls, record: Mapping[str, str]) -> "CatalogRow":
        return cls(
            name=pick(record, "Name", "Folder/Product"),
            path=pick(record, "RelativePath", "Relative Path", "Relative_Path"),
            drive_link=pick(record, "Drive Link", "Drive"),
            thumb=pick(record, "Thumbs Path", "Thumb"),
            top_order_raw=pick(record, "TopOrder", "Top Order", "topOrder"),
            section=pick(record, "Section", "section") or DEFAULT_SECTION,
            category=pick(record, "Category", "category"),
        )


@dataclass(slots=True)
class BrandRow:
    slug: str
    name: str
    primary: str
    accent: str
    text: str
    bg: str
    whatsapp: str
    default_category: str
    tagline: str = ""
    hero_title: str = ""
    hero_subtitle: str = ""
    footer_text: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, str]) -> "BrandRow":
        return cls(
            slug=pick(record, "csvslug", "slug"),
            name=pick(record, "brandName", "name"),
            primary=pick(record, "primaryColor", "primary_color"),
            accent=pick(record, "accentColor", "accent_color"),
            text=pick(record, "textColor", "text_color"),
            bg=pick(record, "bgColor", "bg_color"),
            whatsapp=pick(record, "whatsapp"),
            default_category=pick(record, "defaultCategory", "default_category"),
            tagline=pick(record, "tagline", "brandTagline"),
            hero_title=pick(record, "heroTitle", "hero_title"),
            hero_subtitle=pick(record, "heroSubtitle", "hero_subtitle"),
            footer_text=pick(record, "footerText", "footer_text"),
        )


@dataclass(slots=True)
class MirrorRow:
    folder: str
    key: str
    found: bool

    @classmethod
    def from_record(cls, record: Mapping[str, str]) -> "MirrorRow":
        flag = pick(record, "found", "Found", "status", "Status").lower()
        return cls(
            folder=pick(record, "folder_path", "Folder Path", "source_folder", "Source Folder"),
            key=pick(record, "dest_key", "Destination", "r2_key", "R2 Key"),
            found=flag in {"yes", "y", "true", "1", "found"},
        )
