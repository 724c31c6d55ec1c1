"""
PayPal integration error taxonomy.

Rejected webhook signatures are not errors: they come back as
``VerificationOutcome.rejected`` from the verifier.
"""

from typing import Any


class PayPalError(Exception):
    pass


class ConfigurationError(PayPalError):
    """A required process-wide setting is missing."""


class PayPalTransportError(PayPalError):
    """The call to PayPal failed before a usable response came back."""


class PayPalBusinessError(PayPalError):
    """PayPal answered with a structured failure (declined, invalid order, ...)."""

    def __init__(self, message: str, status_code: int, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details
