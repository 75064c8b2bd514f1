"""REST API layer."""
