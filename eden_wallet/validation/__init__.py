"""Validation package."""

from eden_wallet.validation.validator import TransactionValidator

__all__ = ["TransactionValidator"]
