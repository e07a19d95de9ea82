"""Domain errors for the submission flow."""


class ContestError(Exception):
    """Base class for expected submission flow failures."""


class IngestionError(ContestError):
    """Raised when a photo cannot be downloaded, transformed, or stored."""


class StateError(ContestError):
    """Raised when a message arrives in the wrong session state."""


class SubmissionsClosedError(StateError):
    """Raised when submissions are closed."""


class LockedError(ContestError):
    """Raised when a finalized submission or winner change is protected."""


class SubmissionNotFoundError(ContestError, KeyError):
    """Raised when a catalog key is unknown."""
