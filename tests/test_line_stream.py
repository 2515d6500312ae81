import pathlib

import pytest

import access_log_statistics


@pytest.fixture(scope="session")
def large_text_file_path(tmp_path_factory: pytest.TempPathFactory) -> pathlib.Path:
    """Fixture for testing buffering on a large text file."""
    tmp_path = pathlib.Path(tmp_path_factory.mktemp("large_text_file"))

    # Generate a test file ~1 MB in total size
    # Each line is unique so that order can be checked
    test_file_path = tmp_path / "large_text_file.txt"
    content = [f"{line_index:08d}" + "a" * 52 + "\n" for line_index in range(10**4 * 2)]
    with open(file=test_file_path, mode="w") as test_file:
        test_file.writelines(content)

    return test_file_path


def test_line_stream(large_text_file_path: pathlib.Path):
    """Basic test of the LineStream class."""
    maximum_buffer_size_in_bytes = 10**5  # 100 KB
    line_stream = access_log_statistics.LineStream(
        file_path=large_text_file_path,
        maximum_buffer_size_in_bytes=maximum_buffer_size_in_bytes,
    )

    assert iter(line_stream) is line_stream, "LineStream object is not iterable!"

    number_of_lines = 0
    for line_index, line in enumerate(line_stream):
        assert line == f"{line_index:08d}" + "a" * 52, f"LineStream delivered an unexpected line at {line_index}!"
        # One read of buffer_size characters plus at most one line carried over from the previous read
        buffered_characters = sum(len(buffered_line) + 1 for buffered_line in line_stream._buffer)
        assert (
            buffered_characters <= line_stream.buffer_size + 61
        ), "LineStream object loaded a buffer exceeding the threshold!"
        number_of_lines += 1

    assert number_of_lines == 10**4 * 2, "LineStream object did not deliver the correct number of lines!"
    assert line_stream.is_exhausted is True
    assert line_stream._io is None, "LineStream did not release the file handle at the end of the stream!"

    with pytest.raises(StopIteration):
        next(line_stream)


def test_final_line_without_line_break(tmp_path: pathlib.Path):
    test_file_path = tmp_path / "no_final_line_break.log"
    test_file_path.write_text("first\nsecond\nthird")

    # A buffer smaller than a line forces the fragments to be carried across reads
    line_stream = access_log_statistics.LineStream(file_path=test_file_path, maximum_buffer_size_in_bytes=6)

    assert list(line_stream) == ["first", "second", "third"]


def test_final_line_break_does_not_add_an_empty_line(tmp_path: pathlib.Path):
    test_file_path = tmp_path / "final_line_break.log"
    test_file_path.write_bytes(b"first\r\n\r\nthird\r\n")

    line_stream = access_log_statistics.LineStream(file_path=test_file_path)

    assert list(line_stream) == ["first", "", "third"]


def test_empty_file(tmp_path: pathlib.Path):
    test_file_path = tmp_path / "empty.log"
    test_file_path.touch()

    line_stream = access_log_statistics.LineStream(file_path=test_file_path)

    assert list(line_stream) == []
    assert line_stream.is_exhausted is True


def test_pause_and_resume(tmp_path: pathlib.Path):
    test_file_path = tmp_path / "pause.log"
    test_file_path.write_text("first\nsecond\n")

    line_stream = access_log_statistics.LineStream(file_path=test_file_path)
    assert next(line_stream) == "first"

    line_stream.pause()
    with pytest.raises(RuntimeError):
        next(line_stream)
    assert line_stream.number_of_delivered_lines == 1, "A line was delivered while the stream was paused!"

    line_stream.resume()
    assert next(line_stream) == "second"


def test_end_of_stream_fires_exactly_once(tmp_path: pathlib.Path):
    test_file_path = tmp_path / "end.log"
    test_file_path.write_text("first\nsecond\n")

    delivered_lines_at_end = []
    line_stream = access_log_statistics.LineStream(file_path=test_file_path)
    line_stream.on_end(lambda: delivered_lines_at_end.append(line_stream.number_of_delivered_lines))

    for _ in line_stream:
        assert len(delivered_lines_at_end) == 0, "End-of-stream fired before all lines were delivered!"

    for _ in range(3):
        with pytest.raises(StopIteration):
            next(line_stream)

    assert delivered_lines_at_end == [2]


def test_missing_file_ends_with_zero_lines(tmp_path: pathlib.Path):
    error_folder = access_log_statistics.ACCESS_LOG_STATISTICS_BASE_FOLDER_PATH / "errors"
    task_id = "missing_file_test"

    ended = []
    line_stream = access_log_statistics.LineStream(file_path=tmp_path / "does_not_exist.log", task_id=task_id)
    line_stream.on_end(lambda: ended.append(True))

    assert list(line_stream) == []
    assert ended == [True]

    collected_error_file_paths = list(error_folder.glob(pattern=f"*_file_read_errors_{task_id}.txt"))
    assert len(collected_error_file_paths) != 0, "The read error was not collected!"


def test_invalid_utf8_bytes_are_replaced_in_place(tmp_path: pathlib.Path):
    test_file_path = tmp_path / "invalid_bytes.log"
    test_file_path.write_bytes(b"first\nsec\xffond\nthird\nfourth\n")

    ended = []
    # A buffer of a few characters places the invalid byte in the middle of the reads
    line_stream = access_log_statistics.LineStream(file_path=test_file_path, maximum_buffer_size_in_bytes=12)
    line_stream.on_end(lambda: ended.append(line_stream.number_of_delivered_lines))

    assert list(line_stream) == ["first", "sec\ufffdond", "third", "fourth"]
    assert ended == [4]


class _FailingReader:
    """Stands in for an open text file whose next read fails."""

    def __init__(self, io):
        self._io = io

    def read(self, size: int = -1) -> str:
        raise OSError("Input/output error")

    def close(self) -> None:
        self._io.close()


def test_read_error_after_delivered_lines(tmp_path: pathlib.Path):
    error_folder = access_log_statistics.ACCESS_LOG_STATISTICS_BASE_FOLDER_PATH / "errors"
    task_id = "read_failure_test"

    test_file_path = tmp_path / "read_failure.log"
    test_file_path.write_text("first\nsecond\nthird\n")

    ended = []
    # Six characters per read, so only the first line is buffered when the handle starts failing
    line_stream = access_log_statistics.LineStream(
        file_path=test_file_path, maximum_buffer_size_in_bytes=18, task_id=task_id
    )
    line_stream.on_end(lambda: ended.append(line_stream.number_of_delivered_lines))

    assert next(line_stream) == "first"
    line_stream._io = _FailingReader(io=line_stream._io)

    assert list(line_stream) == []
    assert ended == [1]
    assert line_stream.is_exhausted is True
    assert line_stream._io is None

    with pytest.raises(StopIteration):
        next(line_stream)
    assert ended == [1], "End-of-stream fired more than once!"

    collected_error_file_paths = list(error_folder.glob(pattern=f"*_file_read_errors_{task_id}.txt"))
    assert len(collected_error_file_paths) != 0, "The read error was not collected!"


def test_context_manager_releases_file_handle(large_text_file_path: pathlib.Path):
    with access_log_statistics.LineStream(file_path=large_text_file_path) as line_stream:
        next(line_stream)
        assert line_stream._io is not None

    assert line_stream._io is None
