import typing

_ACCESS_LOG_FIELDS = (
    "ip_address",
    "time",
    "method",
    "resource",
    "protocol",
    "status_code",
    "size",
    "referer",
    "user_agent",
    "browser",
    "os",
    "country",
)

# ip, ident, authuser, [date:time, tz], "method, resource, protocol", status, size, "referer", "user-agent...
_MINIMUM_NUMBER_OF_TOKENS = 12

_QUOTE_CHARACTERS = "'\""


class AccessLogRecord(typing.NamedTuple):
    """A single fully parsed and enriched line of an access log."""

    ip_address: str
    time: str
    method: str
    resource: str
    protocol: str
    status_code: int
    size: int
    referer: str
    user_agent: str
    browser: str
    os: str
    country: str


class UserAgentFamilies(typing.NamedTuple):
    browser_family: str
    os_family: str


class PercentageEntry(typing.NamedTuple):
    value: str
    percent: float


class MalformedLineError(ValueError):
    """Raised when a raw line cannot be decomposed into the expected access log layout."""


class DirectoryListingError(OSError):
    """Raised when the folder of log files cannot be listed."""
