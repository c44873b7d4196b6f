import os
import tempfile
import threading
import unittest
from datetime import date

from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from streamtv.accounts import register_customer
from streamtv.credentials import CustomerIdentity
from streamtv.database import init_db, make_engine
from streamtv.models import Customer, Episode, Show
from streamtv.session import SessionContext
from streamtv.utils.security import generate_salt, hash_password

DAY_ONE = date(2024, 3, 1)
DAY_TWO = date(2024, 3, 2)


def seed_catalog(db) -> None:
    db.add_all([
        Show(show_id="S01", title="Night Shift"),
        Show(show_id="S02", title="Harbor Lights"),
        Episode(show_id="S01", episode_id="E01", title="Pilot", airdate=date(2019, 9, 1)),
        Episode(show_id="S01", episode_id="E02", title="Second Watch", airdate=date(2019, 9, 8)),
        Episode(show_id="S02", episode_id="E01", title="Low Tide", airdate=date(2020, 1, 5)),
    ])
    db.commit()


def add_customer_row(db, customer_id: str, username: str, password: str = "secret123") -> Customer:
    salt = generate_salt()
    customer = Customer(
        customer_id=customer_id,
        username=username,
        password_hash=hash_password(password, salt),
        salt=salt,
        first_name="Legacy",
        last_name="Customer",
        email=f"{username}@example.com",
        payment_token="tok_legacy",
        member_since=DAY_ONE,
        renewal_date=DAY_ONE,
    )
    db.add(customer)
    db.commit()
    return customer


def logged_in(customer: Customer) -> SessionContext:
    ctx = SessionContext(token="test-token")
    ctx.login(CustomerIdentity(username=customer.username, customer_id=customer.customer_id))
    return ctx


def registration(username: str = "alice01", password: str = "secret123", **overrides) -> dict:
    form = {
        "username": username,
        "password": password,
        "confirm_password": password,
        "first_name": "Alice",
        "last_name": "Smith",
        "email": f"{username}@example.com",
        "payment_token": "tok_4242",
    }
    form.update(overrides)
    return form


class DatabaseTestCase(unittest.TestCase):
    """In-memory database with the catalog seeded and no customers yet."""

    def setUp(self):
        self.engine = make_engine("sqlite://", poolclass=StaticPool)
        self.Session = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        init_db(self.engine)
        self.db = self.Session()
        seed_catalog(self.db)

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def register(self, username: str = "alice01", password: str = "secret123", **overrides) -> Customer:
        return register_customer(self.db, on=DAY_ONE, **registration(username, password, **overrides))

    def context_for(self, customer: Customer) -> SessionContext:
        return logged_in(customer)


def run_concurrently(workers: int, target):
    """Call ``target(i)`` from ``workers`` threads released together.

    Returns the results in completion order and any exceptions raised.
    """
    barrier = threading.Barrier(workers)
    results, failures = [], []
    lock = threading.Lock()

    def run(i):
        try:
            barrier.wait()
            result = target(i)
            with lock:
                results.append(result)
        except Exception as exc:  # collected for the test to assert on
            with lock:
                failures.append(exc)

    threads = [threading.Thread(target=run, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results, failures


class FileDatabaseTestCase(unittest.TestCase):
    """File-backed SQLite so each thread gets its own connection."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        url = "sqlite:///" + os.path.join(self.tmp.name, "streamtv.db")
        self.engine = make_engine(url, connect_args={"check_same_thread": False, "timeout": 30})
        self.Session = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        init_db(self.engine)
        db = self.Session()
        seed_catalog(db)
        db.close()

    def tearDown(self):
        self.engine.dispose()
        self.tmp.cleanup()

    def register(self, username: str = "alice01", password: str = "secret123", **overrides) -> Customer:
        db = self.Session()
        try:
            return register_customer(db, on=DAY_ONE, **registration(username, password, **overrides))
        finally:
            db.close()
