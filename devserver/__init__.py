"""Local SPA dev server with an upstream API proxy."""

__version__ = "1.0.0"
