import logging
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from streamtv.crud import create_customer, delete_customer, get_customers_by_username
from streamtv.customer_ids import resync_sequence
from streamtv.errors import DuplicateUsername, InvalidInput, NotFound, StoreUnavailable
from streamtv.models import Customer
from streamtv.session import SessionContext
from streamtv.utils.dates import today
from streamtv.validation import validate_registration

logger = logging.getLogger(__name__)


def register_customer(db: Session, username: str, password: str, confirm_password: str,
                      first_name: str, last_name: str, email: str, payment_token: str,
                      on: date = None) -> Customer:
    errors = validate_registration(
        username, password, confirm_password, first_name, last_name, email, payment_token)
    if errors:
        raise InvalidInput(errors)

    username = username.strip()
    if get_customers_by_username(db, username):
        raise DuplicateUsername()

    fields = dict(
        username=username,
        password=password,
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        email=email.strip(),
        payment_token=payment_token.strip(),
        today=on or today(),
    )
    for attempt in range(2):
        try:
            customer = create_customer(db, **fields)
            break
        except IntegrityError:
            db.rollback()
            if get_customers_by_username(db, username):
                # the username was taken between the check and the insert
                raise DuplicateUsername()
            if attempt:
                raise StoreUnavailable("Could not allocate a customer ID - Try again")
            # the allocated ID is already stored; move the counter past it
            resync_sequence(db)
            db.commit()

    logger.info("Registered %s as %s", customer.username, customer.customer_id)
    return customer


def delete_account(db: Session, ctx: SessionContext) -> str:
    """Remove the logged-in customer with their queue and watch history."""
    user = ctx.require_user()
    if not delete_customer(db, user.customer_id):
        raise NotFound(f"Customer {user.customer_id} not found")
    logger.info("Deleted account %s", user.customer_id)
    return user.customer_id
