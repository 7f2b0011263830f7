"""
Exceptions raised by Bid Finder.
"""

from typing import Optional


class BidFinderError(Exception):
    """Base class for all Bid Finder errors."""


class InputValidationError(BidFinderError):
    """A required input was missing. Raised before any external call."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CollaboratorError(BidFinderError):
    """An external provider call failed."""

    provider = 'provider'

    def __init__(self, message: str, status: Optional[int] = None, detail: str = ''):
        super().__init__(message)
        self.status = status
        self.detail = detail

    def __str__(self):
        text = super().__str__()
        if self.status is not None:
            text = f"{text} ({self.status})"
        if self.detail:
            text = f"{text} - {self.detail}"
        return text


class ScrapeError(CollaboratorError):
    provider = 'scrape'


class ExtractionError(CollaboratorError):
    provider = 'extraction'


class EmailDeliveryError(CollaboratorError):
    provider = 'email'
