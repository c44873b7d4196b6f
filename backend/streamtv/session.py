"""Per-request session binding.

A ``SessionContext`` carries the authenticated identity for one request and
is passed explicitly into every queue, watch and account operation. The
``SessionRegistry`` keeps the contexts of logged-in visits in process
memory, keyed by the opaque token stored in the client's cookie.
"""
import logging
import threading
from typing import Dict, Optional, Tuple

import pendulum

from streamtv.config import SESSION_TTL_MINUTES
from streamtv.credentials import CustomerIdentity
from streamtv.errors import Unauthenticated
from streamtv.utils.security import generate_session_token

logger = logging.getLogger(__name__)


class SessionContext:
    def __init__(self, token: Optional[str] = None):
        self.token = token
        self.authenticated = False
        self.username = None
        self.customer_id = None

    def login(self, identity: CustomerIdentity) -> None:
        self.authenticated = True
        self.username = identity.username
        self.customer_id = identity.customer_id

    def logout(self) -> None:
        self.authenticated = False
        self.username = None
        self.customer_id = None

    def current_user(self) -> Optional[CustomerIdentity]:
        if not self.authenticated:
            return None
        return CustomerIdentity(username=self.username, customer_id=self.customer_id)

    def require_user(self) -> CustomerIdentity:
        user = self.current_user()
        if user is None:
            raise Unauthenticated()
        return user


class SessionRegistry:
    def __init__(self, ttl_minutes: int = SESSION_TTL_MINUTES):
        self.ttl_minutes = ttl_minutes
        self._lock = threading.Lock()
        self._sessions: Dict[str, Tuple[SessionContext, pendulum.DateTime]] = {}

    def _expiry(self) -> pendulum.DateTime:
        return pendulum.now("UTC").add(minutes=self.ttl_minutes)

    def _purge(self, now: pendulum.DateTime) -> int:
        # caller holds the lock
        expired = [t for t, (_, expires_at) in self._sessions.items() if expires_at <= now]
        for token in expired:
            ctx, _ = self._sessions.pop(token)
            ctx.logout()
        if expired:
            logger.info("Dropped %d expired sessions", len(expired))
        return len(expired)

    def open(self, identity: CustomerIdentity) -> SessionContext:
        ctx = SessionContext(token=generate_session_token())
        ctx.login(identity)
        with self._lock:
            self._purge(pendulum.now("UTC"))
            self._sessions[ctx.token] = (ctx, self._expiry())
        logger.info("Session opened for %s", identity.customer_id)
        return ctx

    def resolve(self, token: Optional[str]) -> SessionContext:
        """Context bound to ``token``, or an anonymous one.

        Unknown and expired tokens both resolve to an anonymous context. A
        live session's expiry is pushed forward on every use.
        """
        if not token:
            return SessionContext()
        now = pendulum.now("UTC")
        with self._lock:
            self._purge(now)
            entry = self._sessions.get(token)
            if entry is None:
                return SessionContext()
            ctx, _ = entry
            self._sessions[token] = (ctx, self._expiry())
            return ctx

    def close(self, ctx: SessionContext) -> None:
        with self._lock:
            if ctx.token:
                self._sessions.pop(ctx.token, None)
        ctx.logout()

    def close_customer(self, customer_id: str) -> int:
        """End every session belonging to one customer; returns how many."""
        with self._lock:
            tokens = [t for t, (ctx, _) in self._sessions.items() if ctx.customer_id == customer_id]
            for token in tokens:
                ctx, _ = self._sessions.pop(token)
                ctx.logout()
        return len(tokens)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
