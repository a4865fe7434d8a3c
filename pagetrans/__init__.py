"""pagetrans: translate rendered pages through a cached remote translation service."""

__version__ = "0.1.0"
