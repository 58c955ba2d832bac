"""
Error taxonomy for rep-coach.

ValidationError is raised before any generation happens and leaves nothing
mutated.  EmptyPlanError is fatal for one generation call.  PersistenceError
is recoverable: the session result stays in memory and can be re-saved.
"""


class ValidationError(ValueError):
    """Raised when user input or stored data fails validation."""

    pass


class EmptyPlanError(RuntimeError):
    """Raised when plan generation yields no exercises."""

    pass


class PersistenceError(RuntimeError):
    """Raised when the record store cannot be read or written."""

    pass


class SessionStateError(RuntimeError):
    """Raised when a session command is not allowed in the current phase."""

    pass
