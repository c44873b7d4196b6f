import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, IntegrityError

from streamtv.config import LOG_LEVEL
from streamtv.database import init_db
from streamtv.errors import Conflict, InvalidInput, StoreUnavailable, StreamTVError
from streamtv.routes import router
from streamtv.session import SessionRegistry

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create DB tables
    init_db()
    yield


app = FastAPI(title="StreamTV", lifespan=lifespan)
app.state.sessions = SessionRegistry()


@app.exception_handler(StreamTVError)
async def streamtv_error_handler(request: Request, exc: StreamTVError):
    body = {"detail": exc.detail, "retry": exc.retry}
    if isinstance(exc, InvalidInput):
        body["errors"] = [{"field": e.field, "message": e.message} for e in exc.errors]
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(DBAPIError)
async def store_error_handler(request: Request, exc: DBAPIError):
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return await streamtv_error_handler(request, StoreUnavailable())


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity conflict on %s %s: %s", request.method, request.url.path, exc.orig)
    return await streamtv_error_handler(request, Conflict())


app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("streamtv.main:app", host="0.0.0.0", port=8000)
