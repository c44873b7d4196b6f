import os
from dotenv import load_dotenv

# Load environment variables from the .env file located in the project root
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), '..', '..', '.env'))

# Database
DATABASE_URL = os.getenv("STREAMTV_DATABASE_URL", "sqlite:///./streamtv.db")

# All "today" dates (queued, watched, member since) are taken in this zone
TIMEZONE = os.getenv("STREAMTV_TIMEZONE", "America/New_York")

# Sessions
SESSION_COOKIE_NAME = os.getenv("STREAMTV_SESSION_COOKIE", "streamtv_session")
SESSION_TTL_MINUTES = int(os.getenv("STREAMTV_SESSION_TTL_MINUTES", "120"))

# Registration policy
MIN_USERNAME_LENGTH = 5
MIN_PASSWORD_LENGTH = 5
EMAIL_REGEX = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# Customer identifiers: "cust0" + zero-padded number
CUSTOMER_ID_PREFIX = "cust0"
CUSTOMER_ID_DIGITS = 3
CUSTOMER_SEQUENCE_NAME = "customer"

LOG_LEVEL = os.getenv("STREAMTV_LOG_LEVEL", "INFO")
