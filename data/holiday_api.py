"""Public holiday import from the date.nager.at API."""

import logging
from typing import List, Optional

import requests

from config.defaults import HOLIDAY_API_TIMEOUT, HOLIDAY_API_URL
from engine.calendar_rules import to_iso
from engine.errors import PlanningError

logger = logging.getLogger(__name__)


class HolidayImportError(PlanningError):
    """The holiday service could not be reached or returned unusable data."""


def fetch_public_holidays(
    country,
    year: int,
    session: Optional[requests.Session] = None,
    base_url: str = HOLIDAY_API_URL,
    timeout: float = HOLIDAY_API_TIMEOUT,
) -> List[str]:
    """Return the sorted, de-duplicated public holiday dates of a country for a year.

    Args:
        country: Country enum or two-letter code.
        year: Calendar year.
        session: Optional requests session, mainly for connection reuse.

    Raises:
        HolidayImportError: on network, HTTP or payload errors.
    """
    code = str(getattr(country, "value", country)).upper()
    url = f"{base_url.rstrip('/')}/{int(year)}/{code}"
    http = session or requests

    try:
        response = http.get(url, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as exc:
        logger.error("Holiday request %s failed: %s", url, exc)
        raise HolidayImportError(f"Could not load holidays for {code} {year}: {exc}") from exc
    except ValueError as exc:
        logger.error("Holiday response from %s is not JSON: %s", url, exc)
        raise HolidayImportError(f"Invalid holiday data for {code} {year}") from exc

    if not isinstance(payload, list):
        raise HolidayImportError(f"Invalid holiday data for {code} {year}")

    dates = set()
    for entry in payload:
        try:
            dates.add(to_iso(entry["date"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise HolidayImportError(f"Invalid holiday entry for {code} {year}: {entry!r}") from exc

    logger.info("Loaded %d public holidays for %s %s", len(dates), code, year)
    return sorted(dates)
