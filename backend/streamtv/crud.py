from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from streamtv.customer_ids import next_customer_id
from streamtv.models import Customer, QueueEntry, WatchEvent
from streamtv.utils.security import generate_salt, hash_password


def get_customers_by_username(db: Session, username: str):
    return db.execute(select(Customer).where(Customer.username == username)).scalars().all()


def get_customer(db: Session, customer_id: str):
    return db.execute(
        select(Customer).where(Customer.customer_id == customer_id)
    ).scalar_one_or_none()


def create_customer(db: Session, username: str, password: str, first_name: str,
                    last_name: str, email: str, payment_token: str, today: date):
    salt = generate_salt()
    hashed_pw = hash_password(password, salt)
    customer = Customer(
        customer_id=next_customer_id(db),
        username=username,
        password_hash=hashed_pw,
        salt=salt,
        first_name=first_name,
        last_name=last_name,
        email=email,
        payment_token=payment_token,
        member_since=today,
        renewal_date=today,
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def delete_customer(db: Session, customer_id: str) -> bool:
    # watch history and queue go first, then the customer, in one commit
    try:
        db.execute(delete(WatchEvent).where(WatchEvent.customer_id == customer_id))
        db.execute(delete(QueueEntry).where(QueueEntry.customer_id == customer_id))
        deleted = db.execute(delete(Customer).where(Customer.customer_id == customer_id)).rowcount
        db.commit()
    except Exception:
        db.rollback()
        raise
    return deleted > 0
