"""Common error handling for the analytics engine"""

class AnalyticsError(Exception):
    """Base exception for all analytics errors"""
    pass

class ConfigError(AnalyticsError):
    """Base exception for configuration errors"""
    pass

class HistoryOrderError(AnalyticsError, ValueError):
    """Raised when a history slice is not in chronological order"""
    pass

class InvalidObservationError(AnalyticsError, ValueError):
    """Raised when an observation payload cannot be validated"""
    pass

class ProviderError(AnalyticsError):
    """Raised when an external classification provider fails"""
    pass
