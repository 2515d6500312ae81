"""Various private utility functions for handling IP address related tasks."""

import hashlib
import ipaddress
import os
import traceback

import ipinfo
import yaml

from ._config import _IP_HASH_TO_COUNTRY_FILE_PATH, UNKNOWN_COUNTRY
from ._error_collection import _collect_error


class IpinfoCountryLookup:
    def __init__(self, *, task_id: str | None = None):
        """
        Resolve IP addresses to ISO country codes through the ipinfo service.

        Results are cached in memory under a salted hash of the IP address; call `save_cache` to persist them to disk.

        Requires the environment variable 'IPINFO_CREDENTIALS'.
        The optional environment variable 'IP_HASH_SALT' (hex) salts the hashes stored in the cache.
        """
        if "IPINFO_CREDENTIALS" not in os.environ:
            message = "The environment variable 'IPINFO_CREDENTIALS' must be set to look up countries with ipinfo!"
            raise ValueError(message)
        ipinfo_credentials = os.environ["IPINFO_CREDENTIALS"]

        self.ip_hash_salt = bytes.fromhex(os.environ.get("IP_HASH_SALT", ""))
        self.task_id = task_id
        self.handler = ipinfo.getHandler(access_token=ipinfo_credentials)
        self.ip_hash_to_country = _load_ip_hash_to_country_cache()

    def __call__(self, ip_address: str) -> str:
        return get_country_from_ip_address(
            ip_address=ip_address,
            ip_hash_to_country=self.ip_hash_to_country,
            handler=self.handler,
            ip_hash_salt=self.ip_hash_salt,
            task_id=self.task_id,
        )

    def save_cache(self) -> None:
        _save_ip_hash_to_country_cache(ip_hash_to_country=self.ip_hash_to_country)


def get_country_from_ip_address(
    ip_address: str,
    ip_hash_to_country: dict[str, str],
    handler: ipinfo.Handler,
    ip_hash_salt: bytes = b"",
    task_id: str | None = None,
) -> str:
    """
    Identify the country a request came from.

    Addresses that are not globally routable (private, loopback, reserved, ...) or that cannot be parsed at all are
    reported as 'unknown' without contacting the service.
    """
    try:
        parsed_ip_address = ipaddress.ip_address(address=ip_address)
    except ValueError:
        return UNKNOWN_COUNTRY

    if not parsed_ip_address.is_global:
        return UNKNOWN_COUNTRY

    # Hash for anonymization within the cache
    ip_hash = hashlib.sha1(bytes(ip_address, "utf-8") + ip_hash_salt).hexdigest()

    # Early return from the cache for faster performance
    lookup_result = ip_hash_to_country.get(ip_hash, None)
    if lookup_result is not None:
        return lookup_result

    try:
        details = handler.getDetails(ip_address=ip_address)

        country = details.details.get("country", None) or UNKNOWN_COUNTRY
        ip_hash_to_country[ip_hash] = country

        return country
    except ipinfo.exceptions.RequestQuotaExceededError:  # pragma: no cover
        # Return the generic 'unknown' but do not cache
        return UNKNOWN_COUNTRY
    except Exception as exception:  # pragma: no cover
        message = (
            f"Error fetching IP information for {ip_address}!\n\n"
            f"{type(exception)}: {exception}\n\n"
            f"{traceback.format_exc()}"
        )
        _collect_error(message=message, error_type="ipinfo", task_id=task_id)

        return UNKNOWN_COUNTRY


def _load_ip_hash_to_country_cache() -> dict[str, str]:
    """Load the IP hash to country cache from disk."""
    if not _IP_HASH_TO_COUNTRY_FILE_PATH.exists():
        return dict()  # pragma: no cover

    with open(file=_IP_HASH_TO_COUNTRY_FILE_PATH) as stream:
        return yaml.load(stream=stream, Loader=yaml.SafeLoader) or dict()


def _save_ip_hash_to_country_cache(ip_hash_to_country: dict[str, str]) -> None:
    """Save the IP hash to country cache to disk."""
    with open(file=_IP_HASH_TO_COUNTRY_FILE_PATH, mode="w") as stream:
        yaml.dump(data=ip_hash_to_country, stream=stream)
