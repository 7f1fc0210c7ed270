"""Atomic unit of work shared by checkout, cancellation, completion and cart saves.

Each command handler method runs inside a Protean ``UnitOfWork``; this module
adds the two things the handlers cannot do for themselves: serialising
stock-changing units within the process, and turning storage failures into
``TransactionFailure``.
"""

import threading
from contextlib import nullcontext

import structlog
from protean.exceptions import (
    InvalidOperationError,
    ObjectNotFoundError,
    ValidationError,
)
from protean.utils.globals import current_domain

from ordering.errors import OutOfStock, TransactionFailure

logger = structlog.get_logger(__name__)

_stock_lock = threading.RLock()

_COMMIT_ERROR_KEY = "_entity"


def _is_commit_error(exc: ValidationError) -> bool:
    # Protean reports a failed commit as a ValidationError keyed on ``_entity``
    messages = getattr(exc, "messages", None) or {}
    return not isinstance(exc, OutOfStock) and _COMMIT_ERROR_KEY in messages


def run_atomically(command, *, serialised: bool = False):
    """Process ``command`` synchronously as one all-or-nothing unit.

    Args:
        command: A registered Protean command.
        serialised: Hold the process-wide stock lock for the whole unit,
            including its commit. Required for anything that reads and then
            writes product stock.

    Returns:
        Whatever the command handler returns.

    Raises:
        TransactionFailure: the unit failed for a reason other than a domain
            rule and nothing was written.
    """
    operation = type(command).__name__
    guard = _stock_lock if serialised else nullcontext()

    with guard:
        try:
            return current_domain.process(command, asynchronous=False)
        except ValidationError as exc:
            if _is_commit_error(exc):
                logger.error("unit_of_work_failed", operation=operation, error=str(exc.messages))
                raise TransactionFailure(operation, exc) from exc
            raise
        except (ObjectNotFoundError, InvalidOperationError):
            raise
        except Exception as exc:
            logger.error("unit_of_work_failed", operation=operation, error=repr(exc))
            raise TransactionFailure(operation, exc) from exc
