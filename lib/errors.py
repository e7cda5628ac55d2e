"""
Custom error classes for PI Analytics.

Hierarchy:
    AnalyticsError
    ├── ConfigError
    ├── ValidationError
    └── UpstreamError
"""


class AnalyticsError(Exception):
    """Base exception for all PI Analytics errors."""

    def __init__(self, message: str, code: str = "UNKNOWN", details: dict = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class ConfigError(AnalyticsError):
    """Required configuration is missing or malformed."""

    def __init__(self, message: str, setting: str = None):
        super().__init__(
            message, code="CONFIG_ERROR", details={"setting": setting},
        )


class ValidationError(AnalyticsError):
    """Caller input is missing or malformed."""

    status_code = 400

    def __init__(self, message: str, field: str = None):
        super().__init__(
            message, code="VALIDATION_ERROR", details={"field": field},
        )


class UpstreamError(AnalyticsError):
    """The backing store rejected a request or could not be reached."""

    def __init__(
        self, message: str, status_code: int = None, table: str = None, store_code: str = None,
    ):
        self.status_code = status_code
        self.table = table
        self.store_code = store_code
        super().__init__(
            message, code="UPSTREAM_ERROR",
            details={"status_code": status_code, "table": table, "store_code": store_code},
        )
