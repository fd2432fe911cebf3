"""Pipeline orchestration - concurrent fetch and merge."""

from .aggregator import FeedAggregator, merge, run_aggregation

__all__ = ["FeedAggregator", "merge", "run_aggregation"]
