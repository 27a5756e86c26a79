"""Static public holiday table, per country, as ISO date strings.

Only the built-in dates live here. Holidays imported from the public API are
stored on each resource (``dynamic_holidays``) and never written back here.
"""

from typing import Dict, FrozenSet, List

HOLIDAYS: Dict[str, List[str]] = {
    "FR": [
        "2024-01-01", "2024-05-01", "2024-07-14", "2024-12-25",
        "2025-01-01", "2025-05-01", "2025-07-14", "2025-12-25",
        "2026-01-01", "2026-05-01", "2026-07-14", "2026-12-25",
        "2027-01-01", "2027-05-01", "2027-07-14", "2027-12-25",
    ],
    "PT": [
        "2024-01-01", "2024-04-25", "2024-05-01", "2024-06-10", "2024-12-25",
        "2025-01-01", "2025-04-25", "2025-05-01", "2025-06-10", "2025-12-25",
        "2026-01-01", "2026-04-25", "2026-05-01", "2026-06-10", "2026-12-25",
        "2027-01-01", "2027-04-25", "2027-05-01", "2027-06-10", "2027-12-25",
    ],
    "IN": [
        "2024-01-26", "2024-08-15", "2024-10-02",
        "2025-01-26", "2025-08-15", "2025-10-02",
        "2026-01-26", "2026-08-15", "2026-10-02",
        "2027-01-26", "2027-08-15", "2027-10-02",
    ],
    "CO": [
        "2024-01-01", "2024-05-01", "2024-07-20", "2024-08-07", "2024-12-08", "2024-12-25",
        "2025-01-01", "2025-05-01", "2025-07-20", "2025-08-07", "2025-12-08", "2025-12-25",
        "2026-01-01", "2026-05-01", "2026-07-20", "2026-08-07", "2026-12-08", "2026-12-25",
        "2027-01-01", "2027-05-01", "2027-07-20", "2027-08-07", "2027-12-08", "2027-12-25",
    ],
}


def static_holidays(country, table: Dict[str, List[str]] = None) -> FrozenSet[str]:
    """Built-in holiday dates for a country; unknown countries have none."""
    table = HOLIDAYS if table is None else table
    return frozenset(table.get(str(getattr(country, "value", country)), ()))
