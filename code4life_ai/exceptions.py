"""
Exceptions raised by the Code4Life AI package.

All errors derive from Code4LifeError so callers can catch everything the
package raises with a single except clause.
"""


class Code4LifeError(Exception):
    """Base class for all package errors."""


class NoLegalActions(Code4LifeError):
    """
    Raised when a decision is requested but the search root has no children.

    Either the position is terminal or the time budget elapsed before the
    root could be expanded even once.
    """


class ActionPreconditionViolation(Code4LifeError):
    """
    Raised when an action is applied to a state in which it is not legal.

    Children are only ever created from the legal actions of the same state,
    so this signals a bug (usually a state shared between two nodes), not a
    recoverable condition.
    """

    def __init__(self, action, reason: str = ""):
        self.action = action
        self.reason = reason
        message = f"Action '{action}' is not legal in this state"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ProtocolError(Code4LifeError, ValueError):
    """Raised when judge input is malformed or ends unexpectedly."""
