from sqlalchemy import Column, Date, ForeignKey, Integer, String, UniqueConstraint

from streamtv.database import Base


# Registered customer with credentials and membership dates
class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(String, unique=True, index=True, nullable=False)
    username = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    salt = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    payment_token = Column(String, nullable=False)
    member_since = Column(Date, nullable=False)
    renewal_date = Column(Date, nullable=False)


# Named counter backing customer ID allocation
class CustomerSequence(Base):
    __tablename__ = "customer_sequences"

    name = Column(String, primary_key=True)
    value = Column(Integer, nullable=False, default=0)


# Read-only catalog: shows and their episodes
class Show(Base):
    __tablename__ = "shows"

    show_id = Column(String, primary_key=True)
    title = Column(String, nullable=False)


class Episode(Base):
    __tablename__ = "episodes"

    id = Column(Integer, primary_key=True, index=True)
    show_id = Column(String, ForeignKey("shows.show_id"), index=True, nullable=False)
    episode_id = Column(String, nullable=False)
    title = Column(String, nullable=False)
    airdate = Column(Date, nullable=True)

    __table_args__ = (
        UniqueConstraint("show_id", "episode_id", name="uq_episode_show"),
    )


# A show on a customer's watchlist
class QueueEntry(Base):
    __tablename__ = "queue_entries"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(String, ForeignKey("customers.customer_id"), index=True, nullable=False)
    show_id = Column(String, nullable=False)
    date_queued = Column(Date, nullable=False)

    __table_args__ = (
        UniqueConstraint("customer_id", "show_id", name="uq_queue_customer_show"),
    )


# "This customer watched this episode on this date". Not tied to the queue.
class WatchEvent(Base):
    __tablename__ = "watch_events"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(String, ForeignKey("customers.customer_id"), index=True, nullable=False)
    show_id = Column(String, nullable=False)
    episode_id = Column(String, nullable=False)
    date_watched = Column(Date, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "customer_id", "show_id", "episode_id", "date_watched",
            name="uq_watch_event_per_day",
        ),
    )
