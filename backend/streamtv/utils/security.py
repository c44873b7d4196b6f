import os
import hmac
import hashlib


# Generates a 16-byte cryptographic salt as a hexadecimal string
def generate_salt() -> str:
    return os.urandom(16).hex()


# Returns an HMAC-SHA256 hash of the password using the provided salt
def hash_password(password: str, salt: str) -> str:
    return hmac.new(salt.encode(), password.encode(), hashlib.sha256).hexdigest()


# Constant-time check of a password against a stored hash and salt
def verify_password(password: str, salt: str, password_hash: str) -> bool:
    return hmac.compare_digest(hash_password(password, salt), password_hash)


# Opaque token identifying a logged-in session
def generate_session_token() -> str:
    return os.urandom(32).hex()
