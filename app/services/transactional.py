"""
Commit discipline shared by every write path.

``run_atomic`` is for writes to stock and balances. The operation runs inside
the session's transaction and is committed as one unit. A write that lost a
race (``StaleDataError`` from a version check) or a transient backend failure
(lock timeout, serialization failure, deadlock; all surface as
``OperationalError``) rolls the unit back and runs the operation again from
scratch, so it re-reads current state and re-validates. Any other database
error rolls back and surfaces as ``PersistenceFailure``.

``commit_edit`` is for profile and catalog edits, which are not replayed.
"""

import logging

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import EditConflict, PersistenceFailure, StoreError

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (StaleDataError, OperationalError)


def run_atomic(db: Session, operation, *, attempts: int, label: str):
    """
    Run ``operation()`` and commit, retrying on write conflicts.

    ``operation`` must be safe to re-run: it reads everything it validates
    against on every call. Its return value is passed through.
    """
    attempts = max(1, attempts)

    for attempt in range(1, attempts + 1):
        try:
            result = operation()
            db.commit()
            return result

        except StoreError:
            # Validation failed before anything was written
            db.rollback()
            raise

        except RETRYABLE_ERRORS as exc:
            db.rollback()

            if attempt == attempts:
                logger.error(
                    "%s gave up after %s attempts: %s",
                    label, attempts, exc.__class__.__name__,
                )
                raise PersistenceFailure() from exc

            logger.warning(
                "%s conflicted (attempt %s/%s), retrying: %s",
                label, attempt, attempts, exc.__class__.__name__,
            )

        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("%s failed while committing", label)
            raise PersistenceFailure() from exc


def commit_edit(db: Session, *, label: str, duplicate_message: str | None = None):
    """
    Commit a plain edit (profile, catalog) without retrying it.

    The edit was built from what the caller read, so a lost race is reported
    back as ``EditConflict`` rather than replayed. A unique-key clash raises
    ``EditConflict`` with ``duplicate_message``.
    """
    try:
        db.commit()

    except StaleDataError as exc:
        db.rollback()
        logger.warning("%s lost a race with another write", label)
        raise EditConflict() from exc

    except IntegrityError as exc:
        db.rollback()
        logger.warning("%s violated a constraint: %s", label, exc.orig)
        if duplicate_message:
            raise EditConflict(duplicate_message) from exc
        raise EditConflict("Record conflicts with existing data") from exc

    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s failed while committing", label)
        raise PersistenceFailure() from exc
