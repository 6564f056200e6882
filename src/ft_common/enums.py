"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class Currency(str, Enum):
    IDR = "IDR"
    USD = "USD"
    EUR = "EUR"
    JPY = "JPY"


class CategoryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class EntryKind(str, Enum):
    """Which ledger table an entry lives in."""
    INCOME = "income"
    EXPENSE = "expense"


class SessionState(str, Enum):
    """Outcome of resolving a request's credentials."""
    NO_AUTH = "NO_AUTH"
    ACCESS_VALID = "ACCESS_VALID"
    ACCESS_INVALID = "ACCESS_INVALID"
    REFRESH_SUCCESS = "REFRESH_SUCCESS"
    REFRESH_FAILURE = "REFRESH_FAILURE"
