from __future__ import annotations


class ObserverError(Exception):
    """Base error."""


class DatabaseError(ObserverError):
    """Raised when connecting, querying or introspecting the database fails."""


class SessionStateError(ObserverError):
    """Raised when a session is used while it is not open."""


class DriverAdapterError(ObserverError):
    """Raised when a DB driver adapter cannot be used."""


class ConfigurationError(ObserverError):
    """Raised when settings cannot be used to run any scenario."""
