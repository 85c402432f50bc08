# exceptions.py

"""Custom exceptions for District Stats."""

class StatsError(Exception):
    """Base exception for statistics collection errors."""
    pass

class CollectionError(StatsError):
    """Exception for failures reaching the node facts transport."""
    pass

class DataStoreError(StatsError):
    """Exception for failures reaching the broker or persisted store."""
    pass

class ConfigurationError(StatsError):
    """Exception for configuration-related errors."""
    pass

class UnknownProfileError(StatsError):
    """Exception for a profile with no summary to evaluate."""
    pass
