"""Call the access log statistics pipeline from the command line."""

import click

from ._access_log_statistics_pipeline import compute_access_log_statistics
from ._config import DEFAULT_LOGS_FOLDER_PATH
from ._globals import DirectoryListingError
from ._ip_utils import IpinfoCountryLookup
from ._report_sinks import HttpReportSink, TsvReportSink, combine_report_sinks, print_report


@click.command(name="compute_access_log_statistics")
@click.option(
    "--logs_folder_path",
    help="The path to the folder containing all access log files.",
    required=False,
    type=click.Path(writable=False),
    default=DEFAULT_LOGS_FOLDER_PATH,
)
@click.option(
    "--maximum_buffer_size_in_mb",
    help=(
        "The theoretical maximum amount of RAM (in MB) to use on each buffer iteration when reading from the "
        "source text files. "
        "Actual total RAM usage will be higher due to overhead and caching."
    ),
    required=False,
    type=click.IntRange(min=1),  # Bare minimum of 1 MB
    default=100,
)
@click.option(
    "--sort_file_names",
    help="Process the log files in natural sort order instead of directory listing order.",
    is_flag=True,
    default=False,
)
@click.option(
    "--report_folder_path",
    help="If specified, also write one TSV report per attribute to this folder.",
    required=False,
    type=click.Path(writable=True),
    default=None,
)
@click.option(
    "--report_url",
    help="If specified, also POST each report as JSON to this URL with the attribute as the 'metric' parameter.",
    required=False,
    type=str,
    default=None,
)
@click.option(
    "--collect_malformed_lines",
    help="Write every skipped line to the error collection folder.",
    is_flag=True,
    default=False,
)
def _compute_access_log_statistics_cli(
    logs_folder_path: str,
    maximum_buffer_size_in_mb: int,
    sort_file_names: bool,
    report_folder_path: str | None,
    report_url: str | None,
    collect_malformed_lines: bool,
) -> None:
    report_sinks = [print_report]
    if report_folder_path is not None:
        report_sinks.append(TsvReportSink(report_folder_path=report_folder_path))
    if report_url is not None:
        report_sinks.append(HttpReportSink(url=report_url))
    maximum_buffer_size_in_bytes = maximum_buffer_size_in_mb * 10**6

    country_lookup = IpinfoCountryLookup()
    try:
        compute_access_log_statistics(
            country_lookup=country_lookup,
            logs_folder_path=logs_folder_path,
            report_sink=combine_report_sinks(*report_sinks),
            maximum_buffer_size_in_bytes=maximum_buffer_size_in_bytes,
            sort_file_names=sort_file_names,
            collect_malformed_lines=collect_malformed_lines,
        )
    except DirectoryListingError as exception:
        raise click.ClickException(str(exception)) from exception
    finally:
        country_lookup.save_cache()

    return None
