import re
from dataclasses import dataclass
from typing import List

from streamtv.config import EMAIL_REGEX, MIN_PASSWORD_LENGTH, MIN_USERNAME_LENGTH


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


def _blank(value) -> bool:
    return value is None or not str(value).strip()


def validate_login(username: str, password: str) -> List[FieldError]:
    errors = []
    if _blank(username):
        errors.append(FieldError("username", "User Name is required"))
    if _blank(password):
        errors.append(FieldError("password", "Password is required"))
    return errors


def validate_registration(
    username: str,
    password: str,
    confirm_password: str,
    first_name: str,
    last_name: str,
    email: str,
    payment_token: str,
) -> List[FieldError]:
    """Check a registration form before anything touches the store.

    Returns every problem found, in form order; an empty list means the
    form is acceptable.
    """
    errors = []

    if _blank(username):
        errors.append(FieldError("username", "User Name is required"))
    elif len(username.strip()) < MIN_USERNAME_LENGTH:
        errors.append(FieldError(
            "username", f"User Name must be at least {MIN_USERNAME_LENGTH} characters"))

    if _blank(password):
        errors.append(FieldError("password", "Password is required"))
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.append(FieldError(
            "password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters"))
    elif password != confirm_password:
        errors.append(FieldError("confirm_password", "Password and Verify Password must match"))

    if _blank(first_name):
        errors.append(FieldError("first_name", "First Name is required"))
    if _blank(last_name):
        errors.append(FieldError("last_name", "Last Name is required"))

    if _blank(email) or not re.match(EMAIL_REGEX, email.strip()):
        errors.append(FieldError("email", "A valid Email is required"))

    if _blank(payment_token):
        errors.append(FieldError("payment_token", "Credit Card is required"))

    return errors
