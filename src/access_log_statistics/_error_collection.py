import datetime
import importlib.metadata
import pathlib

from ._config import ACCESS_LOG_STATISTICS_BASE_FOLDER_PATH


def _collect_error(message: str, error_type: str, task_id: str | None = None) -> None:
    """
    Append a diagnostic message to the error file of its kind under the base folder.

    Nothing is raised back to the caller; the run continues and the file can be inspected afterwards.

    Parameters
    ----------
    message : str
        The full text of the diagnostic, typically including the offending line or file and a traceback.
    error_type : str
        The kind of problem, used in the file name: "line", "file_read", or "ipinfo".
    task_id : str, optional
        Identifier of the run that hit the problem, so concurrent runs write to separate files.
    """
    error_file_path = _get_error_file_path(error_type=error_type, task_id=task_id)
    error_file_path.parent.mkdir(exist_ok=True)

    # Blank lines separate consecutive entries
    with open(file=error_file_path, mode="a") as io:
        io.write(f"{message}\n\n")


def _get_error_file_path(*, error_type: str, task_id: str | None) -> pathlib.Path:
    try:
        version = importlib.metadata.version(distribution_name="access_log_statistics")
    except importlib.metadata.PackageNotFoundError:
        version = "unknown"
    today = datetime.date.today().strftime("%y%m%d")

    tags = [f"v{version}", today, error_type, "errors"]
    if task_id is not None:
        tags.append(task_id)

    return ACCESS_LOG_STATISTICS_BASE_FOLDER_PATH / "errors" / f"{'_'.join(tags)}.txt"
