"""Domain error taxonomy for the delivery context.

Validation-style failures reuse Protean's ValidationError so the framework's
FastAPI integration maps them to 400. The remaining types carry a Protean-style
``messages`` dict and are mapped by ``delivery.api.errors``:

    InvalidTransition   -> 400
    TerminalStateError  -> 409
    Conflict            -> 409  (ClaimConflict, AlreadyResolved)
    Forbidden           -> 403
"""

from protean.exceptions import ValidationError


class InvalidTransition(ValidationError):
    """The requested status change is not allowed from the current status."""


class TerminalStateError(InvalidTransition):
    """The order is in a terminal status and can no longer change."""


class _DeliveryError(Exception):
    def __init__(self, messages: dict[str, list[str]]):
        self.messages = messages
        super().__init__(messages)


class Conflict(_DeliveryError):
    """The operation lost against the current state of the ledger."""


class ClaimConflict(Conflict):
    """The order or bordereau is already held by someone else."""


class AlreadyResolved(Conflict):
    """The deposit has already been confirmed or rejected."""


class Forbidden(_DeliveryError):
    """The actor's role or identity does not permit the operation."""
