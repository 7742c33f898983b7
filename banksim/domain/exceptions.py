"""
Domain Errors
Business-rule violations raised synchronously by engines and services.
None of these are transient; callers surface them, nothing retries them.
"""


class SimulationError(Exception):
    """Base class for all simulation business errors"""


class ValidationError(SimulationError, ValueError):
    """Non-positive or malformed amount, out-of-range term, bad catalog code"""


class InsufficientFunds(ValidationError):
    """Debit exceeds the available balance"""


class OverDivestment(ValidationError):
    """Divest amount exceeds the invested balance"""


class NotFound(SimulationError, LookupError):
    """Unknown slot, client, job, mortgage or property"""


class AlreadyProcessed(SimulationError):
    """Mortgage status transition attempted on a non-PENDING mortgage"""


class Unavailable(SimulationError):
    """Property is no longer AVAILABLE"""


class InvalidTransition(SimulationError):
    """Repayment status change not allowed from the current status"""
