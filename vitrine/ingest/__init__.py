"""Ingestion helpers."""

from __future__ import annotations

from vitrine.ingest.csv_text import parse_csv
from vitrine.ingest.models import BrandRow, CatalogRow, MirrorRow

__all__ = ["BrandRow", "CatalogRow", "MirrorRow", "parse_csv"]
