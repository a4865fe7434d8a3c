"""Web application package for pagetrans."""

from flask import Flask


def create_app(config=None, client=None, cache=None) -> Flask:
    """Application factory for the web interface."""
    from .app import build_app  # Import here to avoid circular imports

    return build_app(config=config, client=client, cache=cache)


__all__ = ["create_app"]
