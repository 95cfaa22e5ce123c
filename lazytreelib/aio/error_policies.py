"""
Error reporting policies for LazyTreeLib.

Commands of a tree view never raise. Errors detected inside a command are
handed to an ErrorPolicy, which decides how to record and log them before
the view forwards them to its ``on_error`` listener.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..errors import FetchError, NotFoundError, TreeStateError, ValidationError


def _error_record(error: Exception, operation: str, node_id: Optional[str]) -> Dict[str, Any]:
    return {
        'node_id': node_id,
        'operation': operation,
        'error': error,
        'error_type': type(error).__name__,
        'error_message': str(error),
    }


class ErrorPolicy(ABC):
    """
    Base class for error reporting policies.

    Subclasses implement different strategies for recording errors that
    occur while running tree view commands.
    """

    @abstractmethod
    def handle(self, error: Exception, operation: str, node_id: Optional[str] = None) -> None:
        """
        Handle an error reported by a tree view command.

        Args:
            error: The exception that was detected
            operation: Name of the command that failed (e.g. 'expanding node')
            node_id: The node the command was working on, if any
        """
        pass


class ContinueOnErrorsPolicy(ErrorPolicy):
    """
    Policy that records errors and logs a warning for each one.

    This is the default: the view keeps working, errors are collected for
    later inspection and show up in the log.
    """

    def __init__(self, verbose: bool = True, logger: Optional[logging.Logger] = None):
        """
        Initialize the policy.

        Args:
            verbose: If True, log a warning when an error occurs
            logger: Logger to write to (defaults to the module logger)
        """
        self.errors: List[Dict[str, Any]] = []
        self.failed_fetches: List[Optional[str]] = []
        self.verbose = verbose
        self.logger = logger or logging.getLogger(__name__)

    def handle(self, error: Exception, operation: str, node_id: Optional[str] = None) -> None:
        """Record the error and log it if verbose."""
        self.errors.append(_error_record(error, operation, node_id))

        if isinstance(error, FetchError):
            self.failed_fetches.append(node_id)

        if self.verbose:
            self.logger.warning("Error %s: %s", operation, error)

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts and details
        """
        return {
            'total_errors': len(self.errors),
            'validation_errors': sum(1 for e in self.errors if isinstance(e['error'], ValidationError)),
            'not_found_errors': sum(1 for e in self.errors if isinstance(e['error'], NotFoundError)),
            'fetch_errors': sum(1 for e in self.errors if isinstance(e['error'], FetchError)),
            'other_errors': sum(1 for e in self.errors if not isinstance(e['error'], TreeStateError)),
            'errors': self.errors  # Full error details
        }

    def clear(self) -> None:
        self.errors.clear()
        self.failed_fetches.clear()


class CollectErrorsPolicy(ErrorPolicy):
    """
    Policy that collects all errors without logging.

    Similar to ContinueOnErrorsPolicy but silent. Useful for tests and for
    presenting all errors in one place at the end.
    """

    def __init__(self):
        """Initialize the policy."""
        self.errors: List[Dict[str, Any]] = []

    def handle(self, error: Exception, operation: str, node_id: Optional[str] = None) -> None:
        """Silently collect the error."""
        self.errors.append(_error_record(error, operation, node_id))

    @property
    def messages(self) -> List[str]:
        return [e['error_message'] for e in self.errors]

    def clear(self) -> None:
        self.errors.clear()


def create_error_policy(verbose: bool = True, logger: Optional[logging.Logger] = None) -> ErrorPolicy:
    """
    Convenience function to create the default error policy.

    Args:
        verbose: If True, errors are logged as warnings
        logger: Logger for the warnings

    Returns:
        ContinueOnErrorsPolicy when verbose, CollectErrorsPolicy otherwise
    """
    if verbose:
        return ContinueOnErrorsPolicy(verbose=True, logger=logger)
    return CollectErrorsPolicy()
