"""
Ladder error taxonomy.

Every error is recoverable: the service turns it into a status message and
the HTTP layer maps it to a status code.
"""


class LadderError(Exception):
    """Base class for all ladder errors."""
    message = "Ladder error."

    def __init__(self, detail: str = None):
        self.detail = detail
        super().__init__(f"{self.message} {detail}" if detail else self.message)


class LadderValidationError(LadderError):
    """User input rejected before projection."""
    message = "Invalid input."


class ComputationError(LadderError):
    """Inputs parsed but the projection never reached the goal."""
    message = "Calculation error."


class AlreadyCompleteError(LadderError):
    """Progress action on a ladder that already reached its goal."""
    message = "Goal reached!"


class PersistenceError(LadderError):
    """The backing store failed; previously observed state is intact."""
    message = "Storage error."


class LadderNotFoundError(LadderError):
    message = "Ladder not found."


class LadderBusyError(LadderError):
    message = "Saving... please wait."


class ConfirmationRequiredError(LadderError):
    """A two-step action was confirmed without being requested first."""
    message = "Nothing to confirm."
