"""Period bucketing for report keys."""

from src.models.ledger import PeriodMode


# Key length kept from a YYYY-MM-DD date for each mode
_KEY_LENGTH = {
    PeriodMode.DAILY: 10,
    PeriodMode.MONTHLY: 7,
    PeriodMode.YEARLY: 4,
}


def bucket_key(date: str, mode: PeriodMode) -> str:
    """
    Map a calendar date string to its bucket key.

    Daily keeps the date, Monthly keeps YYYY-MM, Yearly keeps YYYY.
    This is plain truncation of the string, not date arithmetic, so no
    timezone can move an entry into a neighbouring bucket. Malformed input
    gives a malformed but stable key.
    """
    if mode == PeriodMode.DAILY:
        return date
    return date[:_KEY_LENGTH[mode]]
