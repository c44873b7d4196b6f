from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from streamtv import accounts, queue_manager, watch_tracker
from streamtv.config import SESSION_COOKIE_NAME, SESSION_TTL_MINUTES
from streamtv.credentials import authenticate
from streamtv.database import get_db
from streamtv.session import SessionContext, SessionRegistry
from streamtv.utils.dates import today

router = APIRouter()


# Request model for customer registration
class RegisterRequest(BaseModel):
    username: str
    password: str
    confirm_password: str
    first_name: str
    last_name: str
    email: str
    payment_token: str


# Request model for customer login
class LoginRequest(BaseModel):
    username: str
    password: str


# Registry of logged-in sessions, created once per app in main
def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


# Resolves the session cookie into this request's context
def get_session(request: Request,
                registry: SessionRegistry = Depends(get_session_registry)) -> SessionContext:
    return registry.resolve(request.cookies.get(SESSION_COOKIE_NAME))


# Calendar day used for queue and watch dates
def get_today():
    return today()


def _watch_event(event):
    return {
        "customer_id": event.customer_id,
        "show_id": event.show_id,
        "episode_id": event.episode_id,
        "date_watched": event.date_watched.isoformat(),
    }


@router.post("/register", status_code=201)
def register_customer(request: RegisterRequest, db: Session = Depends(get_db), day=Depends(get_today)):
    customer = accounts.register_customer(
        db,
        username=request.username,
        password=request.password,
        confirm_password=request.confirm_password,
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        payment_token=request.payment_token,
        on=day,
    )
    return {
        "message": "Customer registered successfully!",
        "username": customer.username,
        "customer_id": customer.customer_id,
        "member_since": customer.member_since.isoformat(),
    }


@router.post("/login")
def login_customer(request: LoginRequest, response: Response, db: Session = Depends(get_db),
                   registry: SessionRegistry = Depends(get_session_registry)):
    identity = authenticate(db, request.username, request.password)
    ctx = registry.open(identity)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        ctx.token,
        max_age=SESSION_TTL_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    return {
        "message": "Login successful",
        "username": identity.username,
        "customer_id": identity.customer_id,
    }


@router.post("/logout")
def logout_customer(response: Response, ctx: SessionContext = Depends(get_session),
                    registry: SessionRegistry = Depends(get_session_registry)):
    registry.close(ctx)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"message": "Logged out"}


@router.get("/me")
def current_customer(ctx: SessionContext = Depends(get_session)):
    user = ctx.require_user()
    return {"username": user.username, "customer_id": user.customer_id}


@router.post("/enqueue/{show_id}")
def enqueue_show(show_id: str, db: Session = Depends(get_db),
                 ctx: SessionContext = Depends(get_session), day=Depends(get_today)):
    entry = queue_manager.enqueue(db, ctx, show_id, on=day)
    return {
        "show_id": entry.show_id,
        "queued": True,
        "date_queued": entry.date_queued.isoformat(),
    }


@router.post("/dequeue/{show_id}")
def dequeue_show(show_id: str, db: Session = Depends(get_db),
                 ctx: SessionContext = Depends(get_session)):
    removed = queue_manager.dequeue(db, ctx, show_id)
    return {"show_id": show_id, "queued": False, "removed": removed}


@router.get("/queue")
def get_queue(db: Session = Depends(get_db), ctx: SessionContext = Depends(get_session)):
    return {"queued": queue_manager.list_queue(db, ctx)}


@router.get("/queue/{show_id}")
def get_queue_status(show_id: str, db: Session = Depends(get_db),
                     ctx: SessionContext = Depends(get_session)):
    user = ctx.require_user()
    return {"show_id": show_id, "queued": queue_manager.is_queued(db, user.customer_id, show_id)}


@router.post("/watch_episode/{show_id}/{episode_id}")
def watch_episode(show_id: str, episode_id: str, db: Session = Depends(get_db),
                  ctx: SessionContext = Depends(get_session), day=Depends(get_today)):
    event, created = watch_tracker.record_watch(db, ctx, show_id, episode_id, on=day)
    return {"recorded": created, "event": _watch_event(event)}


@router.get("/history/{show_id}")
def get_history(show_id: str, db: Session = Depends(get_db),
                ctx: SessionContext = Depends(get_session)):
    user = ctx.require_user()
    events = watch_tracker.history(db, user.customer_id, show_id)
    return {"show_id": show_id, "history": [_watch_event(e) for e in events]}


@router.get("/watched/{show_id}")
def get_watched(show_id: str, db: Session = Depends(get_db),
                ctx: SessionContext = Depends(get_session)):
    return {"show_id": show_id, "watched": watch_tracker.last_watched(db, ctx, show_id)}


@router.delete("/account")
def delete_account(response: Response, db: Session = Depends(get_db),
                   ctx: SessionContext = Depends(get_session),
                   registry: SessionRegistry = Depends(get_session_registry)):
    customer_id = accounts.delete_account(db, ctx)
    registry.close_customer(customer_id)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"message": "Account deleted", "customer_id": customer_id}
