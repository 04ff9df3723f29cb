"""Exception types raised by the salondesk package."""


class SalonDeskError(Exception):
    """Base class for all salondesk errors."""


class ConfigurationError(SalonDeskError, ValueError):
    """A required setting (usually a webhook URL) is missing or malformed."""


class WebhookError(SalonDeskError):
    """A webhook call failed at the network/HTTP layer or returned an unusable body."""


class AccessDeniedError(SalonDeskError, PermissionError):
    """The current session is not allowed to view the requested data."""
