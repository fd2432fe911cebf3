"""Error taxonomy for the feed aggregation service.

Only configuration and source-list failures are fatal to a request.
Fetch and parse failures are absorbed per source.
"""


class FriendFeedError(Exception):
    """Base class for all service errors."""


class ConfigurationError(FriendFeedError):
    """Required configuration is missing or invalid."""


class SourceListError(FriendFeedError):
    """The friend source list could not be fetched or parsed."""


class FetchError(FriendFeedError):
    """A feed could not be retrieved after all retry attempts."""

    def __init__(self, url: str, detail: str):
        super().__init__(f"{url}: {detail}")
        self.url = url
        self.detail = detail


class ParseError(FriendFeedError):
    """A feed document has an unexpected or malformed shape."""
