"""Analytics pixel service."""
