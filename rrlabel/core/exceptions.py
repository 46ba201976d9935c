"""Exception hierarchy for RRLabel.

Exceptions are organized by functional area. Every RRLabel exception carries a
human-readable message plus an optional ``details`` dictionary with context
that callers can log or present.
"""

from typing import List, Optional, Any, Dict


class RRLabelError(Exception):
    """Base exception for all RRLabel errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize RRLabelError with message and optional details.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error message with details if available."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# DOCUMENT EXCEPTIONS
# =============================================================================

class DocumentError(RRLabelError):
    """Base exception for manifest document errors."""
    pass


class UnsupportedVersionError(DocumentError):
    """Raised when a document carries a version this build cannot load."""

    def __init__(self, found: Any, supported: int):
        """Initialize with version information.

        Args:
            found: Version tag found in the document (may be missing/None)
            supported: The single version this implementation understands
        """
        message = (
            f"Unsupported manifest version {found!r}: "
            f"only version {supported} can be loaded"
        )
        super().__init__(message, {"found": found, "supported": supported})
        self.found = found
        self.supported = supported


class DocumentFormatError(DocumentError):
    """Raised when a document does not match the manifest schema."""

    def __init__(self, problems: List[str], source: Optional[str] = None):
        """Initialize with the list of schema problems.

        Args:
            problems: Human-readable descriptions of each schema violation
            source: Optional description of where the document came from
        """
        message = "Invalid manifest document:\n" + "\n".join(f"  - {p}" for p in problems)
        details = {"source": source} if source else None
        super().__init__(message, details)
        self.problems = problems


# =============================================================================
# CALIBRATION EXCEPTIONS
# =============================================================================

class CalibrationError(RRLabelError):
    """Base exception for calibration errors."""
    pass


class IncompleteCalibrationError(CalibrationError):
    """Raised when calibration corners or the layout size are missing."""

    def __init__(self, missing: List[str]):
        """Initialize with the missing inputs.

        Args:
            missing: Names of the missing corners or layout fields
        """
        message = f"Calibration is incomplete, missing: {', '.join(missing)}"
        super().__init__(message, {"missing": missing})
        self.missing = missing


class DegenerateCalibrationError(CalibrationError):
    """Raised when calibration points do not define a valid homography.

    Coincident or collinear corners make the linear system singular; callers
    should treat the calibration as incomplete and ask for re-calibration.
    """
    pass


# =============================================================================
# INTERACTION EXCEPTIONS
# =============================================================================

class InteractionError(RRLabelError):
    """Base exception for pointer interaction errors."""
    pass


class TransformUnavailableError(InteractionError):
    """Raised when a surface cannot provide an invertible screen transform."""
    pass


# =============================================================================
# STORE EXCEPTIONS
# =============================================================================

class StoreError(RRLabelError):
    """Base exception for manifest store errors."""
    pass


class ListenerError(StoreError):
    """Raised after notification when one or more listeners failed.

    The new document is already committed when this is raised; every listener
    has been offered the notification.
    """

    def __init__(self, failures: List[BaseException]):
        """Initialize with the listener failures.

        Args:
            failures: Exceptions raised by listeners, in notification order
        """
        message = f"{len(failures)} manifest listener(s) failed: {failures[0]!r}"
        super().__init__(message, {"failures": len(failures)})
        self.failures = failures


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(RRLabelError):
    """Base exception for configuration-related errors."""
    pass


class ConfigurationFileError(ConfigurationError):
    """Raised when configuration file cannot be found or parsed."""
    pass


class ConfigurationValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, problems: List[str]):
        """Initialize with validation problems.

        Args:
            problems: Human-readable descriptions of each invalid setting
        """
        message = "Configuration validation failed:\n" + "\n".join(f"  - {p}" for p in problems)
        super().__init__(message)
        self.problems = problems


# =============================================================================
# ARCHIVE EXCEPTIONS
# =============================================================================

class ArchiveError(RRLabelError):
    """Raised when a project archive cannot be written or read."""
    pass
