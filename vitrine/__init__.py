"""Static catalog data pipeline."""

__version__ = "2.1.0"
