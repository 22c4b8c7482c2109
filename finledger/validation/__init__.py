"""Input validation package."""

from finledger.validation.validator import LedgerInputValidator, LedgerValidationError

__all__ = ["LedgerInputValidator", "LedgerValidationError"]
