"""Customer identifier allocation.

Identifiers look like ``cust0001``: the ``cust0`` prefix followed by the
customer number, zero-padded to three digits. Numbers past 999 simply grow
(``cust01000``). Numbers come from a counter row in ``customer_sequences``
that is incremented inside the registering transaction, so two concurrent
registrations can never be handed the same number.
"""
import logging
import re

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from streamtv.config import CUSTOMER_ID_DIGITS, CUSTOMER_ID_PREFIX, CUSTOMER_SEQUENCE_NAME
from streamtv.models import Customer, CustomerSequence

logger = logging.getLogger(__name__)

_CUSTOMER_ID_RE = re.compile(r"^cust(\d+)$")


def format_customer_id(number: int) -> str:
    return f"{CUSTOMER_ID_PREFIX}{number:0{CUSTOMER_ID_DIGITS}d}"


def parse_customer_number(customer_id: str) -> int:
    match = _CUSTOMER_ID_RE.match(customer_id or "")
    if not match:
        raise ValueError(f"Not a customer identifier: {customer_id!r}")
    return int(match.group(1))


def next_customer_number(current_max_id: str = None) -> int:
    """max + 1 over existing identifiers; 1 when there are none."""
    if not current_max_id:
        return 1
    return parse_customer_number(current_max_id) + 1


def highest_customer_id(db: Session):
    # compared numerically, "cust01000" sorts before "cust0999" as text
    ids = db.execute(select(Customer.customer_id)).scalars().all()
    if not ids:
        return None
    return max(ids, key=parse_customer_number)


def ensure_sequence(db: Session) -> CustomerSequence:
    """Create the counter row, seeded from the existing customers, if missing."""
    seq = db.get(CustomerSequence, CUSTOMER_SEQUENCE_NAME)
    if seq is None:
        start = next_customer_number(highest_customer_id(db)) - 1
        seq = CustomerSequence(name=CUSTOMER_SEQUENCE_NAME, value=start)
        db.add(seq)
        db.flush()
        logger.info("Seeded customer sequence at %d", start)
    return seq


def _bump(db: Session) -> int:
    result = db.execute(
        update(CustomerSequence)
        .where(CustomerSequence.name == CUSTOMER_SEQUENCE_NAME)
        .values(value=CustomerSequence.value + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def next_customer_id(db: Session) -> str:
    """Allocate the next customer identifier.

    Must run in the same transaction as the customer insert; the caller
    commits. The counter row stays write-locked until then.
    """
    if not _bump(db):
        ensure_sequence(db)
        _bump(db)

    number = db.execute(
        select(CustomerSequence.value)
        .where(CustomerSequence.name == CUSTOMER_SEQUENCE_NAME)
    ).scalar_one()
    return format_customer_id(number)


def resync_sequence(db: Session) -> int:
    """Move the counter past any identifier already stored.

    Rows written outside registration (imports, restores) can hold numbers
    the counter has not handed out yet. The counter never moves backwards.
    """
    ensure_sequence(db)
    floor = next_customer_number(highest_customer_id(db)) - 1
    db.execute(
        update(CustomerSequence)
        .where(
            CustomerSequence.name == CUSTOMER_SEQUENCE_NAME,
            CustomerSequence.value < floor,
        )
        .values(value=floor)
        .execution_options(synchronize_session=False)
    )
    logger.warning("Customer sequence resynced to at least %d", floor)
    return floor
