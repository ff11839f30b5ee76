"""Gaming Dashboard backend: scheduled AI/commerce agents behind a small JSON API."""

__version__ = "2.0.0"
