"""Media enrichment passes over a built catalog."""
