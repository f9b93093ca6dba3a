"""Code shared across Sello services."""
