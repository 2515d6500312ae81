"""Primary functions for computing the statistics of a folder of access log files."""

import enum
import pathlib
import uuid
from collections.abc import Callable

import tqdm
from pydantic import Field, validate_call

from ._access_log_line_parser import parse_access_log_line
from ._attribute_accumulator import AttributeAccumulator
from ._config import DEFAULT_LOGS_FOLDER_PATH, DEFAULT_MAXIMUM_BUFFER_SIZE_IN_BYTES, TRACKED_ATTRIBUTES
from ._error_collection import _collect_error
from ._globals import MalformedLineError, PercentageEntry, UserAgentFamilies
from ._line_stream import LineStream
from ._log_source import LogSource
from ._report_sinks import ReportSink, print_report
from ._user_agent_utils import classify_user_agent


class PipelineState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    STREAMING_FILE = "streaming_file"
    ADVANCING_FILE = "advancing_file"
    REPORTING = "reporting"
    DONE = "done"


class AccessLogStatisticsPipeline:
    def __init__(
        self,
        *,
        log_source: LogSource,
        country_lookup: Callable[[str], str],
        user_agent_classifier: Callable[[str], UserAgentFamilies] = classify_user_agent,
        report_sink: ReportSink = print_report,
        attribute_names: tuple[str, ...] = TRACKED_ATTRIBUTES,
        maximum_buffer_size_in_bytes: int = DEFAULT_MAXIMUM_BUFFER_SIZE_IN_BYTES,
        collect_malformed_lines: bool = False,
        file_tqdm_kwargs: dict | None = None,
    ):
        """
        Drive a single run over every file of a log source, from directory listing to the final reports.

        Files are streamed strictly one after the other and lines strictly one at a time; the stream is paused while
        each line is parsed and counted. Malformed lines are skipped and counted nowhere.

        Parameters
        ----------
        log_source : LogSource
            The worklist of log files.
        country_lookup : callable
            Takes an IP address and returns its country code, or 'unknown'.
        user_agent_classifier : callable, optional
            Takes a raw user agent and returns its browser and operating system families.
        report_sink : callable, default: print_report
            Called with the attribute name and its ranked percentage entries, once per attribute.
        attribute_names : tuple of strings, default: ("browser", "os", "country")
            The record fields to accumulate statistics over, in reporting order.
        maximum_buffer_size_in_bytes : int, default: 100 MB
            The theoretical maximum amount of RAM (in bytes) to use on each buffer iteration when reading from the
            source text files.
        collect_malformed_lines : bool, default: False
            Whether to also write every skipped line to the error collection folder.
        file_tqdm_kwargs : dict, optional
            Keyword arguments to pass to the tqdm progress bar over log files.
        """
        self.log_source = log_source
        self.country_lookup = country_lookup
        self.user_agent_classifier = user_agent_classifier
        self.report_sink = report_sink
        self.maximum_buffer_size_in_bytes = maximum_buffer_size_in_bytes
        self.collect_malformed_lines = collect_malformed_lines

        default_tqdm_kwargs = {"desc": "Computing statistics over log files...", "position": 0, "leave": True}
        self.file_tqdm_kwargs = {**default_tqdm_kwargs}
        self.file_tqdm_kwargs.update(file_tqdm_kwargs or dict())

        self.accumulators = [AttributeAccumulator(attribute_name=attribute_name) for attribute_name in attribute_names]

        self.state = PipelineState.IDLE
        self.task_id = str(uuid.uuid4())[:5]
        self.number_of_processed_lines = 0
        self.number_of_malformed_lines = 0
        self.number_of_processed_files = 0

    def run(self) -> dict[str, list[PercentageEntry]]:
        """Process every file of the log source and send the report of each accumulator to the report sink."""
        if self.state is not PipelineState.IDLE:
            raise RuntimeError(f"A pipeline can only be run once; it is currently '{self.state.value}'.")

        self.state = PipelineState.LOADING
        file_names = self.log_source.list()

        progress_bar = tqdm.tqdm(total=len(file_names), **self.file_tqdm_kwargs)
        try:
            file_name = self.log_source.next()
            while file_name is not None:
                self.state = PipelineState.STREAMING_FILE
                self._stream_file(file_path=self.log_source.logs_folder_path / file_name)

                progress_bar.update(1)
                file_name = self.log_source.next()
        finally:
            progress_bar.close()

        self.state = PipelineState.REPORTING
        reports = dict()
        for accumulator in self.accumulators:
            report = accumulator.report()
            self.report_sink(accumulator.attribute_name, report)
            reports[accumulator.attribute_name] = report

        self.state = PipelineState.DONE

        return reports

    def _stream_file(self, *, file_path: pathlib.Path) -> None:
        with LineStream(
            file_path=file_path,
            maximum_buffer_size_in_bytes=self.maximum_buffer_size_in_bytes,
            task_id=self.task_id,
        ) as line_stream:
            line_stream.on_end(self._advance_file)
            for raw_access_log_line in line_stream:
                line_stream.pause()
                try:
                    self._process_line(raw_access_log_line=raw_access_log_line)
                finally:
                    line_stream.resume()

    def _advance_file(self) -> None:
        self.state = PipelineState.ADVANCING_FILE
        self.number_of_processed_files += 1

    def _process_line(self, *, raw_access_log_line: str) -> None:
        try:
            access_log_record = parse_access_log_line(
                raw_access_log_line=raw_access_log_line,
                country_lookup=self.country_lookup,
                user_agent_classifier=self.user_agent_classifier,
            )
        except MalformedLineError as exception:
            self.number_of_malformed_lines += 1
            if self.collect_malformed_lines:
                message = f"Error parsing line: {raw_access_log_line}\n\n{type(exception)}: {exception}"
                _collect_error(message=message, error_type="line", task_id=self.task_id)

            return None

        for accumulator in self.accumulators:
            accumulator.add(access_log_record)
        self.number_of_processed_lines += 1

        return None


@validate_call
def compute_access_log_statistics(
    *,
    country_lookup: Callable[[str], str],
    logs_folder_path: str | pathlib.Path = DEFAULT_LOGS_FOLDER_PATH,
    user_agent_classifier: Callable[[str], UserAgentFamilies] = classify_user_agent,
    report_sink: Callable[[str, list[PercentageEntry]], None] = print_report,
    maximum_buffer_size_in_bytes: int = Field(ge=1, default=DEFAULT_MAXIMUM_BUFFER_SIZE_IN_BYTES),
    sort_file_names: bool = False,
    collect_malformed_lines: bool = False,
    file_tqdm_kwargs: dict | None = None,
) -> dict[str, list[PercentageEntry]]:
    """
    Compute the distribution of browsers, operating systems, and countries over every access log file in a folder.

    Parameters
    ----------
    country_lookup : callable
        Takes an IP address and returns its country code, or 'unknown'.
        See `IpinfoCountryLookup` for a lookup backed by the ipinfo service.
    logs_folder_path : folder path, default: "logs"
        The folder containing the access log files.
    user_agent_classifier : callable, optional
        Takes a raw user agent and returns its browser and operating system families.
    report_sink : callable, default: print_report
        Called with the attribute name and its ranked percentage entries, once per attribute.
    maximum_buffer_size_in_bytes : int, default: 100 MB
        The theoretical maximum amount of RAM (in bytes) to use on each buffer iteration when reading from the
        source text files.
    sort_file_names : bool, default: False
        Process the files in natural sort order instead of directory listing order.
    collect_malformed_lines : bool, default: False
        Whether to also write every skipped line to the error collection folder.
    file_tqdm_kwargs : dict, optional
        Keyword arguments to pass to the tqdm progress bar over log files.

    Returns
    -------
    dict
        The ranked percentage entries of each attribute, keyed by attribute name.
    """
    log_source = LogSource(logs_folder_path=logs_folder_path, sort_file_names=sort_file_names)
    access_log_statistics_pipeline = AccessLogStatisticsPipeline(
        log_source=log_source,
        country_lookup=country_lookup,
        user_agent_classifier=user_agent_classifier,
        report_sink=report_sink,
        maximum_buffer_size_in_bytes=maximum_buffer_size_in_bytes,
        collect_malformed_lines=collect_malformed_lines,
        file_tqdm_kwargs=file_tqdm_kwargs,
    )

    return access_log_statistics_pipeline.run()
