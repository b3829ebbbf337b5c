"""
dcdesign/errors.py
==================
Exception hierarchy for the sizing engine and the layout history core.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dcdesign.validation import ValidationResult


class DCDesignError(Exception):
    """Base class for every error raised by dcdesign."""


class ValidationError(DCDesignError):
    """Input parameters failed hard validation.

    The message lists every violation joined by ``", "``; the full
    :class:`~dcdesign.validation.ValidationResult` (warnings included) is kept
    on :attr:`result`.
    """

    def __init__(self, result: "ValidationResult") -> None:
        self.result = result
        super().__init__(f"Invalid parameters: {', '.join(result.errors)}")

    @property
    def errors(self) -> list[str]:
        return list(self.result.errors)


class CalculationError(DCDesignError):
    """A formula could not be evaluated for inputs that passed validation."""


class PersistenceError(DCDesignError):
    """The layout store rejected a read or write. Always recoverable."""


class HistoryError(DCDesignError):
    """The undo/redo history is missing or has an invalid index."""
