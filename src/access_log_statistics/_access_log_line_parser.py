"""
Primary functions for parsing a single line of an access log.

The strategy is to...

1) Split the raw line on whitespace into positional tokens.
   The user agent is the only field that may contain whitespace, so everything after the referer is joined back
   together.
2) Strip the brackets and quotes wrapping the timestamp, request and referer tokens.
3) Enrich the line with the browser and operating system families of the user agent and the country of the IP.
4) Construct an AccessLogRecord; a typing.NamedTuple is used for performance.

Any deviation from the expected layout raises a MalformedLineError; a record is never partially built.
"""

from collections.abc import Callable

from ._globals import (
    _MINIMUM_NUMBER_OF_TOKENS,
    _QUOTE_CHARACTERS,
    AccessLogRecord,
    MalformedLineError,
    UserAgentFamilies,
)
from ._user_agent_utils import classify_user_agent


def parse_access_log_line(
    *,
    raw_access_log_line: str,
    country_lookup: Callable[[str], str],
    user_agent_classifier: Callable[[str], UserAgentFamilies] = classify_user_agent,
) -> AccessLogRecord:
    """
    Parse and enrich a single line of an access log in the Apache 'combined' format.

    Parameters
    ----------
    raw_access_log_line : str
        A line such as
        '127.0.0.1 - frank [10/Oct/2000:13:55:36 -0700] "GET /apache_pb.gif HTTP/1.0" 200 2326 "-" "Mozilla/4.08"'
    country_lookup : callable
        Takes the IP address and returns its country code, or 'unknown' when it cannot be resolved.
    user_agent_classifier : callable, optional
        Takes the raw quoted user agent and returns its browser and operating system families.
        Defaults to a classifier backed by the `user_agents` library.
    """
    tokens = raw_access_log_line.split()

    number_of_tokens = len(tokens)
    if number_of_tokens < _MINIMUM_NUMBER_OF_TOKENS:
        message = (
            f"Expected at least {_MINIMUM_NUMBER_OF_TOKENS} whitespace separated fields but found "
            f"{number_of_tokens} in line '{raw_access_log_line}'."
        )
        raise MalformedLineError(message)

    ip_address, _, _, timestamp, timezone, method, resource, protocol, status_code, size, referer = tokens[:11]

    # Put the user agent back together
    raw_user_agent = " ".join(tokens[11:])

    time = _get_time(timestamp=timestamp, timezone=timezone, raw_access_log_line=raw_access_log_line)
    handled_status_code = _get_integer(token=status_code, name="status code", raw_access_log_line=raw_access_log_line)
    handled_size = _get_integer(token=size, name="size", raw_access_log_line=raw_access_log_line)

    user_agent_families = user_agent_classifier(raw_user_agent)
    browser = _remove_quotes(string=user_agent_families.browser_family)
    os = _remove_quotes(string=user_agent_families.os_family)
    country = country_lookup(ip_address)

    access_log_record = AccessLogRecord(
        ip_address=ip_address,
        time=time,
        method=method.lstrip('"'),
        resource=resource,
        protocol=protocol.rstrip('"'),
        status_code=handled_status_code,
        size=handled_size,
        referer=referer.strip('"'),
        user_agent=raw_user_agent.strip('"'),
        browser=browser,
        os=os,
        country=country,
    )

    return access_log_record


def _get_time(*, timestamp: str, timezone: str, raw_access_log_line: str) -> str:
    if not timestamp.startswith("[") or not timezone.endswith("]"):
        message = f"Unexpected timestamp: '{timestamp} {timezone}' parsed from line '{raw_access_log_line}'."
        raise MalformedLineError(message)

    return timestamp[1:] + timezone[:-1]


def _get_integer(*, token: str, name: str, raw_access_log_line: str) -> int:
    try:
        return int(token, 10)
    except ValueError as exception:
        message = f"Unexpected {name}: '{token}' parsed from line '{raw_access_log_line}'."
        raise MalformedLineError(message) from exception


def _remove_quotes(*, string: str) -> str:
    return string.translate(str.maketrans("", "", _QUOTE_CHARACTERS))
