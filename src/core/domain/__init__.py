"""
Domain models and value objects.

Contains fundamental domain entities like PriceQuote, Instrument, HolderBalance,
SwapRequest and SwapSubmission.
"""

from src.core.domain.instrument import HolderBalance, Instrument, PriceQuote
from src.core.domain.swap import (
    FieldError,
    SubmissionStatus,
    SwapField,
    SwapRequest,
    SwapSnapshot,
    SwapSubmission,
)

__all__ = [
    # Instrument module
    "PriceQuote",
    "Instrument",
    "HolderBalance",
    # Swap module
    "SwapField",
    "FieldError",
    "SwapRequest",
    "SubmissionStatus",
    "SwapSnapshot",
    "SwapSubmission",
]
