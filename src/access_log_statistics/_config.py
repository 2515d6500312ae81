import os
import pathlib

TRACKED_ATTRIBUTES = ("browser", "os", "country")

UNKNOWN_COUNTRY = "unknown"

DEFAULT_LOGS_FOLDER_PATH = "logs"
DEFAULT_MAXIMUM_BUFFER_SIZE_IN_BYTES = 10**8

ACCESS_LOG_STATISTICS_BASE_FOLDER_PATH = pathlib.Path(
    os.environ.get("ACCESS_LOG_STATISTICS_BASE_FOLDER_PATH", pathlib.Path.home() / ".access_log_statistics")
)
ACCESS_LOG_STATISTICS_BASE_FOLDER_PATH.mkdir(parents=True, exist_ok=True)

_IP_HASH_TO_COUNTRY_FILE_PATH = ACCESS_LOG_STATISTICS_BASE_FOLDER_PATH / "ip_hash_to_country.yaml"
