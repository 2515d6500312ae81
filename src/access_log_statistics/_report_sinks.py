"""Destinations for the ranked percentage reports of each tracked attribute."""

import pathlib
from collections.abc import Callable

import click
import pandas
import requests

from ._globals import PercentageEntry

ReportSink = Callable[[str, list[PercentageEntry]], None]


def print_report(attribute_name: str, percentage_entries: list[PercentageEntry]) -> None:
    click.echo(f"{attribute_name}:")
    if len(percentage_entries) == 0:
        click.echo("    (no values observed)")
        return None

    value_width = max(len(percentage_entry.value) for percentage_entry in percentage_entries)
    for percentage_entry in percentage_entries:
        click.echo(f"    {percentage_entry.value:<{value_width}}  {percentage_entry.percent:6.2f}%")

    return None


class TsvReportSink:
    def __init__(self, *, report_folder_path: str | pathlib.Path):
        """Write the report of each attribute to '<report_folder_path>/<attribute_name>.tsv'."""
        self.report_folder_path = pathlib.Path(report_folder_path)
        self.report_folder_path.mkdir(parents=True, exist_ok=True)

    def __call__(self, attribute_name: str, percentage_entries: list[PercentageEntry]) -> None:
        report = pandas.DataFrame(data=percentage_entries, columns=list(PercentageEntry._fields))

        report_file_path = self.report_folder_path / f"{attribute_name}.tsv"
        report.to_csv(path_or_buf=report_file_path, mode="w", sep="\t", header=True, index=False)


class HttpReportSink:
    def __init__(self, *, url: str, timeout_in_seconds: float = 30.0):
        """
        POST the report of each attribute as JSON.

        The attribute name is sent as the 'metric' query parameter; the body is a list of
        {"value": ..., "percent": ...} objects in ranked order.
        """
        self.url = url
        self.timeout_in_seconds = timeout_in_seconds

    def __call__(self, attribute_name: str, percentage_entries: list[PercentageEntry]) -> None:
        response = requests.post(
            url=self.url,
            params={"metric": attribute_name},
            json=[percentage_entry._asdict() for percentage_entry in percentage_entries],
            timeout=self.timeout_in_seconds,
        )
        response.raise_for_status()


def combine_report_sinks(*report_sinks: ReportSink) -> ReportSink:
    """Send every report to each of the sinks, in the order given."""

    def combined_report_sink(attribute_name: str, percentage_entries: list[PercentageEntry]) -> None:
        for report_sink in report_sinks:
            report_sink(attribute_name, percentage_entries)

    return combined_report_sink
