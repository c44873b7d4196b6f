"""Per-episode watch history.

A watch event records that a customer watched an episode on a given day.
Watching the same episode again on the same day is not recorded twice; on a
later day it is. History belongs to the customer, not to their queue, so
queue changes never remove events.
"""
import logging
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from streamtv.errors import NotFound
from streamtv.models import Episode, WatchEvent
from streamtv.session import SessionContext
from streamtv.utils.dates import today

logger = logging.getLogger(__name__)


def get_episode(db: Session, show_id: str, episode_id: str) -> Episode:
    episode = db.execute(
        select(Episode).where(Episode.show_id == show_id, Episode.episode_id == episode_id)
    ).scalar_one_or_none()
    if episode is None:
        raise NotFound(f"Episode {episode_id} of show {show_id} not found")
    return episode


def _latest(db: Session, customer_id: str, show_id: str, episode_id: str) -> Optional[WatchEvent]:
    return db.execute(
        select(WatchEvent)
        .where(
            WatchEvent.customer_id == customer_id,
            WatchEvent.show_id == show_id,
            WatchEvent.episode_id == episode_id,
        )
        .order_by(WatchEvent.date_watched.desc(), WatchEvent.id.desc())
        .limit(1)
    ).scalar_one_or_none()


def record_watch(db: Session, ctx: SessionContext, show_id: str, episode_id: str,
                 on: date = None) -> Tuple[WatchEvent, bool]:
    """Record that the logged-in customer watched an episode.

    Returns the event and whether it was newly created. When the episode was
    already watched on the same day the existing event comes back with
    ``False``.
    """
    user = ctx.require_user()
    get_episode(db, show_id, episode_id)
    day = on or today()

    latest = _latest(db, user.customer_id, show_id, episode_id)
    if latest is not None and latest.date_watched == day:
        return latest, False

    event = WatchEvent(
        customer_id=user.customer_id,
        show_id=show_id,
        episode_id=episode_id,
        date_watched=day,
    )
    db.add(event)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request recorded the same day first
        db.rollback()
        return _latest(db, user.customer_id, show_id, episode_id), False
    db.refresh(event)
    logger.info("%s watched %s/%s on %s", user.customer_id, show_id, episode_id, day)
    return event, True


def history(db: Session, customer_id: str, show_id: str) -> List[WatchEvent]:
    return db.execute(
        select(WatchEvent)
        .where(WatchEvent.customer_id == customer_id, WatchEvent.show_id == show_id)
        .order_by(WatchEvent.date_watched, WatchEvent.id)
    ).scalars().all()


def last_watched(db: Session, ctx: SessionContext, show_id: str):
    # one row per episode: the most recent day it was watched
    user = ctx.require_user()
    last_date = func.max(WatchEvent.date_watched).label("last_date")
    rows = db.execute(
        select(WatchEvent.episode_id, Episode.title, last_date)
        .join(
            Episode,
            (Episode.show_id == WatchEvent.show_id) & (Episode.episode_id == WatchEvent.episode_id),
        )
        .where(WatchEvent.customer_id == user.customer_id, WatchEvent.show_id == show_id)
        .group_by(WatchEvent.episode_id, Episode.title)
        .order_by(last_date, WatchEvent.episode_id)
    ).all()
    return [
        {"episode_id": episode_id, "title": title, "date_watched": _iso(watched)}
        for episode_id, title, watched in rows
    ]


def _iso(value) -> str:
    # SQLite hands back max() over a DATE column as text
    return value if isinstance(value, str) else value.isoformat()
