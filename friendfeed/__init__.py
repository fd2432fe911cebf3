"""Friend feed aggregation: fetch, normalize and merge friend sites' feeds."""

__version__ = "0.1.0"
