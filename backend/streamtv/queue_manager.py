import logging
from datetime import date
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from streamtv.errors import NotFound
from streamtv.models import QueueEntry, Show
from streamtv.session import SessionContext
from streamtv.utils.dates import today

logger = logging.getLogger(__name__)


def get_show(db: Session, show_id: str) -> Show:
    show = db.get(Show, show_id)
    if show is None:
        raise NotFound(f"Show {show_id} not found")
    return show


def _entry(db: Session, customer_id: str, show_id: str) -> Optional[QueueEntry]:
    return db.execute(
        select(QueueEntry).where(
            QueueEntry.customer_id == customer_id,
            QueueEntry.show_id == show_id,
        )
    ).scalar_one_or_none()


def is_queued(db: Session, customer_id: str, show_id: str) -> bool:
    return _entry(db, customer_id, show_id) is not None


def enqueue(db: Session, ctx: SessionContext, show_id: str, on: date = None) -> QueueEntry:
    """Put a show on the customer's queue.

    Queuing a show that is already queued returns the existing entry and
    keeps its original date.
    """
    user = ctx.require_user()
    get_show(db, show_id)

    existing = _entry(db, user.customer_id, show_id)
    if existing is not None:
        return existing

    entry = QueueEntry(customer_id=user.customer_id, show_id=show_id, date_queued=on or today())
    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent enqueue of the same show
        db.rollback()
        return _entry(db, user.customer_id, show_id)
    db.refresh(entry)
    logger.info("%s queued %s", user.customer_id, show_id)
    return entry


def dequeue(db: Session, ctx: SessionContext, show_id: str) -> bool:
    """Take a show off the customer's queue; watch history is left alone."""
    user = ctx.require_user()
    removed = db.execute(
        delete(QueueEntry).where(
            QueueEntry.customer_id == user.customer_id,
            QueueEntry.show_id == show_id,
        )
    ).rowcount
    db.commit()
    if removed:
        logger.info("%s dequeued %s", user.customer_id, show_id)
    return removed > 0


def list_queue(db: Session, ctx: SessionContext):
    user = ctx.require_user()
    rows = db.execute(
        select(QueueEntry, Show.title)
        .join(Show, Show.show_id == QueueEntry.show_id)
        .where(QueueEntry.customer_id == user.customer_id)
        .order_by(QueueEntry.date_queued, QueueEntry.id)
    ).all()
    return [
        {
            "show_id": entry.show_id,
            "title": title,
            "date_queued": entry.date_queued.isoformat(),
        }
        for entry, title in rows
    ]
