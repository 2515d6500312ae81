import collections
import os
import pathlib

import natsort

from ._globals import DirectoryListingError


class LogSource:
    def __init__(self, *, logs_folder_path: str | pathlib.Path, sort_file_names: bool = False):
        """
        The worklist of log files to process, enumerated once from a folder and drained one file name at a time.

        Parameters
        ----------
        logs_folder_path : string or pathlib.Path
            The folder containing the log files.
            Only regular files are included; subfolders are not searched.
        sort_file_names : bool, default: False
            Natural sort the file names before processing.
            Otherwise the order is whatever the directory listing returns, which differs across platforms.
        """
        self.logs_folder_path = pathlib.Path(logs_folder_path)
        self.sort_file_names = sort_file_names

        self._worklist: collections.deque[str] | None = None

    def list(self) -> list[str]:
        """Enumerate the folder on the first call; return the remaining worklist."""
        if self._worklist is None:
            try:
                file_names = [
                    file_name
                    for file_name in os.listdir(self.logs_folder_path)
                    if (self.logs_folder_path / file_name).is_file()
                ]
            except OSError as exception:
                message = f"Unable to list the log files in '{self.logs_folder_path}': {exception}"
                raise DirectoryListingError(message) from exception

            if self.sort_file_names:
                file_names = natsort.natsorted(file_names)
            self._worklist = collections.deque(file_names)

        return list(self._worklist)

    def next(self) -> str | None:
        """Pop the next file name from the front of the worklist, or return None once it is exhausted."""
        if self._worklist is None:
            self.list()

        if len(self._worklist) == 0:
            return None

        return self._worklist.popleft()

    def __len__(self) -> int:
        return len(self.list())
