"""Catalog tree logic."""
