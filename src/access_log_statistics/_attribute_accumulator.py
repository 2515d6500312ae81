import collections
import math
import sys
from typing import Literal

from pydantic import validate_call

from ._globals import _ACCESS_LOG_FIELDS, AccessLogRecord, PercentageEntry


class AttributeAccumulator:
    @validate_call
    def __init__(self, attribute_name: Literal[_ACCESS_LOG_FIELDS]):
        """
        Count the occurrences of each value of a single attribute across all records of a run.

        Parameters
        ----------
        attribute_name : str
            The field of the AccessLogRecord to track, such as 'browser', 'os', or 'country'.
        """
        self.attribute_name = attribute_name
        self.counts: collections.defaultdict[str, int] = collections.defaultdict(int)
        self.total_observed = 0

    def __repr__(self) -> str:
        return f"AttributeAccumulator(attribute_name={self.attribute_name!r}, total_observed={self.total_observed})"

    def add(self, record: AccessLogRecord) -> None:
        """Count the value of the tracked attribute; records where it is empty are not counted at all."""
        value = getattr(record, self.attribute_name, None)
        if value is None or value == "":
            return

        self.counts[value] += 1
        self.total_observed += 1

    def report(self) -> list[PercentageEntry]:
        """
        The share of each observed value, as a percentage rounded to two decimals, ranked in descending order.

        Values with equal percentages keep the order in which they were first observed. Buckets holding no
        observations, such as those created by reading an absent key from `counts`, are left out.
        """
        if self.total_observed == 0:
            return []

        percentage_entries = [
            PercentageEntry(value=str(value), percent=_round_percent(percent=100 * count / self.total_observed))
            for value, count in self.counts.items()
            if count > 0
        ]
        ranked_percentage_entries = sorted(
            percentage_entries, key=lambda percentage_entry: percentage_entry.percent, reverse=True
        )

        return ranked_percentage_entries


def _round_percent(*, percent: float) -> float:
    """Round half up to two decimals, nudged by machine epsilon to counter floating point truncation."""
    return math.floor((percent + sys.float_info.epsilon) * 100 + 0.5) / 100
