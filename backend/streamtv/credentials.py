import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from streamtv.crud import get_customers_by_username
from streamtv.errors import InvalidCredentials, InvalidInput
from streamtv.utils.security import verify_password
from streamtv.validation import validate_login

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerIdentity:
    username: str
    customer_id: str


def authenticate(db: Session, username: str, password: str) -> CustomerIdentity:
    """Verify a username/password pair and return who it belongs to.

    Anything other than exactly one matching account, or a wrong password,
    raises the same InvalidCredentials error so callers cannot tell whether
    the username exists.
    """
    errors = validate_login(username, password)
    if errors:
        raise InvalidInput(errors)

    # registration stores the username stripped
    username = username.strip()
    rows = get_customers_by_username(db, username)
    if len(rows) != 1:
        logger.info("Login rejected for %r: %d matching accounts", username, len(rows))
        raise InvalidCredentials()

    customer = rows[0]
    if not verify_password(password, customer.salt, customer.password_hash):
        logger.info("Login rejected for %r: wrong password", username)
        raise InvalidCredentials()

    return CustomerIdentity(username=customer.username, customer_id=customer.customer_id)
