"""HTTP application serving the aggregated feed."""

from .app import app

__all__ = ["app"]
