"""Repository ports."""
