"""Error types for pts-cli."""

from typing import Optional, Dict, Any


class PTSError(Exception):
    """Base exception for pts-cli errors."""

    def __init__(self, message: str, code: str = "PTS_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ConfigError(PTSError):
    """Invalid or missing configuration, detected before any database access."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIG_ERROR", details=details)


class UnsupportedDriverError(ConfigError):
    """The configured database driver is not one of mysql, postgres or sqlite."""

    def __init__(self, driver: str):
        super().__init__(f"unsupported database driver: {driver}", details={"driver": driver})
        self.code = "UNSUPPORTED_DRIVER"
        self.driver = driver


class DatabaseConnectionError(PTSError):
    """Error opening or pinging the database connection."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONNECTION_ERROR", details=details)


class IntrospectionError(PTSError):
    """Error while listing tables or enriching a table with columns, comments or DDL."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INTROSPECTION_ERROR", details=details)


class TemplateRenderError(PTSError):
    """Error loading or rendering an output template."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="TEMPLATE_ERROR", details=details)
