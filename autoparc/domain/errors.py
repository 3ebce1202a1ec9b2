"""Domain error taxonomy.

Every failure the engine reports to a caller is one of these. The HTTP layer
maps them to status codes; the ``code`` attribute is the machine-readable
constant sent alongside the message.
"""


class AutoParcError(Exception):
    code = "ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AutoParcError):
    """Missing or malformed input (blank ids, bad date format)."""

    code = "VALIDATION_ERROR"


class NotFoundError(AutoParcError):
    code = "NOT_FOUND"


class NoActiveAssignmentError(NotFoundError):
    """Nothing to unassign: the car has no open assignment."""

    code = "NO_ACTIVE_ASSIGNMENT"

    def __init__(self, message: str = "no active assignment found for this car"):
        super().__init__(message)


class ConflictError(AutoParcError):
    """A car or operator already holds an active assignment, or a unique key clashed."""

    code = "CONFLICT"


class PreconditionError(AutoParcError):
    """Input is well-formed but the current state forbids the operation."""

    code = "PRECONDITION_FAILED"


class OperatorHasActiveAssignmentError(PreconditionError):
    code = "OPERATOR_HAS_ACTIVE_ASSIGNMENT"

    def __init__(self, message: str = "cannot delete operator with active car assignment"):
        super().__init__(message)
