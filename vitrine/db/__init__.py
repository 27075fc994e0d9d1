"""Counter storage."""
