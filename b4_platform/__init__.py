"""B4 Platform backend service."""
