from .common import Disambiguate, as_fold, simplify_abbreviation
from .store import (
    TimeZoneNotFoundError,
    get_system_tz,
    get_tz,
    reset_system_tz,
)

__all__ = [
    "Disambiguate",
    "TimeZoneNotFoundError",
    "as_fold",
    "get_system_tz",
    "get_tz",
    "reset_system_tz",
    "simplify_abbreviation",
]
