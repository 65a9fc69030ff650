"""
Domain error taxonomy.

The HTTP layer maps these onto status codes in `sitestaff.main`; services
raise them and never swallow them.
"""

from typing import Iterable, Optional


class SiteStaffError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(SiteStaffError):
    """Deployment/configuration problem. Aborts the mutation, never user-facing in detail."""
    pass


class StatusNotFoundError(ConfigurationError):
    """A status name referenced by the code is missing from the seeded catalog."""

    def __init__(self, names: Iterable[str]):
        self.names = sorted(set(names))
        super().__init__(f"Statuses not found in catalog: {', '.join(self.names)}")


class NotFoundError(SiteStaffError):
    """Employee, mapping or other record is absent (or hidden from the actor)."""

    def __init__(self, message: str, resource: Optional[str] = None, resource_id=None):
        super().__init__(message)
        self.resource = resource
        self.resource_id = resource_id


class ForbiddenError(SiteStaffError):
    """Access gate denial."""

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason


class ValidationError(SiteStaffError):
    """Malformed input to an action (unknown group, bad field config, ...)."""
    pass
