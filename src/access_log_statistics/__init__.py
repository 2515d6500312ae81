"""
Access log statistics
=====================

Distribution of browsers, operating systems, and countries across a folder of web server access logs.

Each file is streamed in bounded buffers and its lines are handled strictly one at a time:

- every line in the Apache 'combined' format is parsed into an AccessLogRecord;
- the user agent is classified into browser and operating system families and the IP address is resolved to a
  country;
- the values are counted by one AttributeAccumulator per attribute.

Lines that do not follow the format are skipped. Once every file is exhausted, each accumulator reports the
percentage share of every observed value, ranked in descending order, to a report sink.
"""

from ._config import ACCESS_LOG_STATISTICS_BASE_FOLDER_PATH, UNKNOWN_COUNTRY
from ._globals import (
    AccessLogRecord,
    DirectoryListingError,
    MalformedLineError,
    PercentageEntry,
    UserAgentFamilies,
)
from ._line_stream import LineStream
from ._log_source import LogSource
from ._access_log_line_parser import parse_access_log_line
from ._user_agent_utils import classify_user_agent
from ._ip_utils import IpinfoCountryLookup, get_country_from_ip_address
from ._attribute_accumulator import AttributeAccumulator
from ._report_sinks import HttpReportSink, TsvReportSink, combine_report_sinks, print_report
from ._access_log_statistics_pipeline import (
    AccessLogStatisticsPipeline,
    PipelineState,
    compute_access_log_statistics,
)

__all__ = [
    "ACCESS_LOG_STATISTICS_BASE_FOLDER_PATH",
    "UNKNOWN_COUNTRY",
    "AccessLogRecord",
    "DirectoryListingError",
    "MalformedLineError",
    "PercentageEntry",
    "UserAgentFamilies",
    "LineStream",
    "LogSource",
    "parse_access_log_line",
    "classify_user_agent",
    "IpinfoCountryLookup",
    "get_country_from_ip_address",
    "AttributeAccumulator",
    "HttpReportSink",
    "TsvReportSink",
    "combine_report_sinks",
    "print_report",
    "AccessLogStatisticsPipeline",
    "PipelineState",
    "compute_access_log_statistics",
]
