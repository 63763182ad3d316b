"""Custom exceptions for the tour campaign optimizer."""


class CampaignOptimizerError(Exception):
    """Base exception for all campaign optimizer errors."""

    pass


class InvalidCampaignDataError(CampaignOptimizerError):
    """Raised when campaign data cannot be validated."""

    def __init__(self, message: str, issues: list = None):
        """Initialize campaign data validation error.

        Args:
            message: Error message
            issues: List of validation issues found
        """
        super().__init__(message)
        self.issues = issues or []


class DataProviderError(CampaignOptimizerError):
    """Raised when historical performance data cannot be fetched."""

    pass


class TourDataError(CampaignOptimizerError):
    """Raised when tour catalogue operations fail."""

    pass


class CacheError(CampaignOptimizerError):
    """Raised when a cache backend fails."""

    pass
