class StravaError(Exception):
    """Base class for Strava integration errors."""


class StravaAuthError(StravaError):
    """Raised when the API keeps rejecting us after one token refresh."""
