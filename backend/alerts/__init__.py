"""Discord alerts service."""
