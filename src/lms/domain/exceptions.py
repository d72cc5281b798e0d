"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

Two families matter to callers:

- ``EntityNotFoundError`` — the referenced item, borrower or loan is absent.
- ``ValidationError`` — a precondition of a lending transition was violated.

``ConcurrencyConflict`` is raised by a unit of work at commit time and is
handled inside the application layer; callers never see it.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


# --- Not found ----------------------------------------------------------------


class ItemNotFound(EntityNotFoundError):
    """No inventory item with the given id."""


class BorrowerNotFound(EntityNotFoundError):
    """No borrower with the given id."""


class LoanNotFound(EntityNotFoundError):
    """No loan record with the given id."""


# --- Precondition violations --------------------------------------------------


class ItemUnavailable(ValidationError):
    """The item cannot be loaned out in its current availability."""


class BorrowerNotEligible(ValidationError):
    """The borrower's membership does not allow new loans."""


class BorrowerHasOverdueLoans(ValidationError):
    """The borrower holds at least one open loan past its due date."""


class NoActiveLoan(ValidationError):
    """Nothing is currently on loan for the item."""


class LoanMismatch(ValidationError):
    """The item is on loan, but to a different borrower."""


class InvalidOperation(ValidationError):
    """The requested transition is not allowed from the loan's current state."""


# --- Concurrency --------------------------------------------------------------


class ConcurrencyConflict(DomainException):
    """A record changed between read and commit."""
