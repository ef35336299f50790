"""Ledger entry validation package."""

from src.validation.validator import (
    EntryValidator,
    MalformedEntryError,
    parse_amount,
    parse_date,
)

__all__ = ["EntryValidator", "MalformedEntryError", "parse_amount", "parse_date"]
