"""Haven HTTP API package."""
