class ConvertError(Exception):
    """Raised when a feed cannot be converted. Carries the HTTP status to answer with."""

    status = 500

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class TransportError(ConvertError):
    """Raised when the feed cannot be fetched (DNS, connect, TLS, timeout)."""


class UpstreamStatusError(ConvertError):
    """Raised when the feed host answers with anything other than 200."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"error when requesting the feed : bad status code {status_code}")
        self.status_code = status_code


class FeedParseError(ConvertError):
    """Raised when the feed body cannot be parsed as RSS/Atom."""
