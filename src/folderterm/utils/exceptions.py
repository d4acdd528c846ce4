"""
Custom exceptions for FolderTerm.

Each error carries a category and severity for classification, a details
dictionary for logs and a short message suitable for the user.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""

    TERMINAL = "terminal"
    SESSION = "session"
    STORAGE = "storage"
    CONFIG = "config"
    FILESYSTEM = "filesystem"
    VALIDATION = "validation"
    SYSTEM = "system"


class FolderTermError(Exception):
    """Base exception class for all FolderTerm errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
    ):
        """
        Initialize base exception.

        Args:
            message: Technical error message for logging
            category: Error category for classification
            severity: Error severity level
            details: Additional details for debugging
            user_message: User-friendly message for display
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.details = details or {}
        self.user_message = user_message or self._generate_user_message()

    def _generate_user_message(self) -> str:
        category_messages = {
            ErrorCategory.TERMINAL: "A terminal error occurred",
            ErrorCategory.SESSION: "A session error occurred",
            ErrorCategory.STORAGE: "A data storage error occurred",
            ErrorCategory.CONFIG: "A configuration error occurred",
            ErrorCategory.FILESYSTEM: "A file system error occurred",
            ErrorCategory.VALIDATION: "A validation error occurred",
            ErrorCategory.SYSTEM: "A system error occurred",
        }
        return category_messages.get(self.category, "An unexpected error occurred")

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "details": self.details,
            "user_message": self.user_message,
        }

    def __str__(self) -> str:
        return f"[{self.category.value.upper()}:{self.severity.value.upper()}] {self.message}"


# Terminal-related exceptions
class TerminalError(FolderTermError):
    """Base class for terminal-related errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.TERMINAL)
        super().__init__(message, **kwargs)


class TerminalSpawnError(TerminalError):
    """Raised when the shell process cannot be started."""

    def __init__(self, command: str, reason: str, **kwargs):
        message = f"Failed to spawn process '{command}': {reason}"
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("details", {"command": command, "reason": reason})
        kwargs.setdefault("user_message", "Failed to start terminal process")
        super().__init__(message, **kwargs)
        self.command = command
        self.reason = reason


# Session-related exceptions
class SessionError(FolderTermError):
    """Base class for session-related errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.SESSION)
        super().__init__(message, **kwargs)


class SessionNotFoundError(SessionError):
    """Raised when a session is not known to the registry."""

    def __init__(self, session_name: str, **kwargs):
        message = f"Session '{session_name}' not found"
        kwargs.setdefault("details", {"session_name": session_name})
        kwargs.setdefault("user_message", f"Session '{session_name}' could not be found")
        super().__init__(message, **kwargs)


# Storage-related exceptions
class StorageError(FolderTermError):
    """Base class for storage-related errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.STORAGE)
        super().__init__(message, **kwargs)


class StorageReadError(StorageError):
    """Raised when reading from storage fails."""

    def __init__(self, file_path: str, reason: str, **kwargs):
        message = f"Failed to read from '{file_path}': {reason}"
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("details", {"file_path": file_path, "reason": reason})
        kwargs.setdefault("user_message", "Could not load saved data")
        super().__init__(message, **kwargs)


class StorageWriteError(StorageError):
    """Raised when writing to storage fails."""

    def __init__(self, file_path: str, reason: str, **kwargs):
        message = f"Failed to write to '{file_path}': {reason}"
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("details", {"file_path": file_path, "reason": reason})
        kwargs.setdefault("user_message", "Could not save data")
        super().__init__(message, **kwargs)


class StorageCorruptedError(StorageError):
    """Raised when storage data is corrupted."""

    def __init__(self, file_path: str, details: str = "", **kwargs):
        message = f"Storage file '{file_path}' is corrupted"
        if details:
            message += f": {details}"
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault(
            "details", {"file_path": file_path, "corruption_details": details}
        )
        kwargs.setdefault("user_message", "Saved data appears to be corrupted")
        super().__init__(message, **kwargs)


# Configuration-related exceptions
class ConfigError(FolderTermError):
    """Base class for configuration-related errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.CONFIG)
        super().__init__(message, **kwargs)


class ConfigValidationError(ConfigError):
    """Raised when a setting has an unusable value."""

    def __init__(self, config_key: str, value: Any, reason: str, **kwargs):
        message = f"Invalid value for '{config_key}': {value!r} ({reason})"
        kwargs.setdefault("details", {"key": config_key, "value": value, "reason": reason})
        kwargs.setdefault("user_message", f"Configuration error: {reason}")
        super().__init__(message, **kwargs)


# File system exceptions
class DirectoryListingError(FolderTermError):
    """Raised when a directory cannot be enumerated."""

    def __init__(self, directory_path: str, reason: str, **kwargs):
        message = f"Cannot list directory '{directory_path}': {reason}"
        kwargs.setdefault("category", ErrorCategory.FILESYSTEM)
        kwargs.setdefault("severity", ErrorSeverity.LOW)
        kwargs.setdefault("details", {"directory_path": directory_path, "reason": reason})
        super().__init__(message, **kwargs)


def handle_exception(
    exception: Exception,
    context: str = "",
    logger_name: str = None,
    reraise: bool = False,
) -> Optional[FolderTermError]:
    """
    Log an exception and convert it to a FolderTermError.

    Args:
        exception: Exception to handle
        context: Context where the exception occurred
        logger_name: Logger name to use
        reraise: Whether to raise the converted exception

    Returns:
        The FolderTermError describing the failure
    """
    from .logger import log_error_with_context

    log_error_with_context(exception, context, logger_name)

    if isinstance(exception, FolderTermError):
        converted_exception = exception
    else:
        converted_exception = FolderTermError(
            message=str(exception),
            details={"original_type": type(exception).__name__, "context": context},
        )

    if reraise:
        if converted_exception is exception:
            raise exception
        raise converted_exception from exception
    return converted_exception
