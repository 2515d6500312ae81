from ._helpers import (
    CHROME_ON_WINDOWS,
    FIREFOX_ON_LINUX,
    find_random_example_lines,
    get_hash_salt,
    make_example_access_log_line,
    make_static_country_lookup,
    write_example_logs_folder,
)

__all__ = [
    "CHROME_ON_WINDOWS",
    "FIREFOX_ON_LINUX",
    "find_random_example_lines",
    "get_hash_salt",
    "make_example_access_log_line",
    "make_static_country_lookup",
    "write_example_logs_folder",
]
