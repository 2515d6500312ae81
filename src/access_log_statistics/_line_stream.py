import pathlib
import traceback
from collections.abc import Callable

from ._config import DEFAULT_MAXIMUM_BUFFER_SIZE_IN_BYTES
from ._error_collection import _collect_error


class LineStream:
    def __init__(
        self,
        *,
        file_path: str | pathlib.Path,
        maximum_buffer_size_in_bytes: int = DEFAULT_MAXIMUM_BUFFER_SIZE_IN_BYTES,
        task_id: str | None = None,
    ):
        """
        Lazily deliver the lines of a text file one at a time, reading it into RAM using buffers of a specified size.

        The stream can be paused and resumed; no line is ever delivered while it is paused.

        End-of-stream is signalled exactly once: iteration raises StopIteration, `is_exhausted` becomes True, the file
        handle is released, and every callback registered through `on_end` is called.

        Bytes that are not valid UTF-8 are replaced with U+FFFD, so only the lines containing them are affected.
        A file that cannot be opened or read is treated as having no further lines beyond those already delivered; the
        error is collected and the stream ends normally.

        Parameters
        ----------
        file_path : string or pathlib.Path
            The path to the text file to be read.
        maximum_buffer_size_in_bytes : int, default: 100 MB
            The theoretical maximum amount of RAM (in bytes) to be used by the LineStream object.
        task_id : str, optional
            Identifier attached to any collected read errors.
        """
        self.file_path = pathlib.Path(file_path)
        self.maximum_buffer_size_in_bytes = maximum_buffer_size_in_bytes
        self.task_id = task_id

        # The actual amount of characters to read per iteration is 3x less than theoretical maximum usage
        # due to decoding and handling
        self.buffer_size = max(int(maximum_buffer_size_in_bytes / 3), 1)

        self.is_paused = False
        self.is_exhausted = False
        self.number_of_delivered_lines = 0

        self._is_opened = False
        self._io = None
        self._buffer: list[str] = []
        self._buffer_index = 0
        self._incomplete_line = ""
        self._end_callbacks: list[Callable[[], None]] = []

    def __iter__(self):
        return self

    def __next__(self) -> str:
        """Deliver the next line of the file, or raise StopIteration if the file is exhausted."""
        if self.is_paused:
            raise RuntimeError(f"Cannot request a line from '{self.file_path}' while the stream is paused!")
        if self.is_exhausted:
            raise StopIteration

        while self._buffer_index >= len(self._buffer):
            if not self._load_next_buffer():
                self._end()
                raise StopIteration

        line = self._buffer[self._buffer_index]
        self._buffer_index += 1
        self.number_of_delivered_lines += 1

        return line

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback) -> None:
        self.close()

    def pause(self) -> None:
        self.is_paused = True

    def resume(self) -> None:
        self.is_paused = False

    def on_end(self, callback: Callable[[], None]) -> None:
        """Register a callback to be called once when the end of the stream is reached."""
        self._end_callbacks.append(callback)

    def close(self) -> None:
        """Release the file handle without signalling end-of-stream."""
        if self._io is not None:
            self._io.close()
            self._io = None

    def _load_next_buffer(self) -> bool:
        """Read the next buffer of complete lines; return False once nothing remains to be delivered."""
        if not self._is_opened:
            self._is_opened = True
            try:
                self._io = open(file=self.file_path, mode="r", encoding="utf-8", errors="replace")
            except OSError as exception:
                self._collect_read_error(exception=exception)
                return False

        if self._io is None:
            return False

        try:
            intermediate_text = self._io.read(self.buffer_size)
        except OSError as exception:
            self._collect_read_error(exception=exception)
            return False

        # Check if we are at the end of the file; a final fragment without a line break is its own line
        if intermediate_text == "":
            self.close()
            if self._incomplete_line == "":
                return False

            self._buffer = [self._incomplete_line]
            self._buffer_index = 0
            self._incomplete_line = ""
            return True

        # Universal newlines mode has already translated every line terminator to "\n"
        # The last line split by the intermediate buffer may or may not be complete
        split_intermediate_text = (self._incomplete_line + intermediate_text).split("\n")
        self._incomplete_line = split_intermediate_text[-1]

        self._buffer = split_intermediate_text[:-1]
        self._buffer_index = 0

        return True

    def _collect_read_error(self, *, exception: Exception) -> None:
        self.close()
        self._incomplete_line = ""

        message = (
            f"Error reading log file: {self.file_path}\n\n"
            f"{type(exception)}: {exception}\n\n"
            f"{traceback.format_exc()}"
        )
        _collect_error(message=message, error_type="file_read", task_id=self.task_id)

    def _end(self) -> None:
        if self.is_exhausted:
            return

        self.is_exhausted = True
        self.close()
        for callback in self._end_callbacks:
            callback()
