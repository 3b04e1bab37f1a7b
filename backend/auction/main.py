"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the auction backend.
Controllers are intentionally thin: they accept requests, delegate to
services, and return JSON responses. Services raise domain errors which
`exception_handlers` turns into `{"error_message": ...}` responses.

Endpoints implemented (all but `/` and `/health` under `/api`):
- POST /users
- POST /login
- POST /logout
- GET /users/{user_id}
- GET /search
- POST /item
- GET /item/{item_id}
- POST /item/{item_id}/bid
- GET /item/{item_id}/bid
- POST /item/{item_id}/question
- GET /item/{item_id}/question
- POST /question/{question_id}
"""

from fastapi import APIRouter, FastAPI, Depends, Path, Query, Request
from fastapi.responses import Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
from typing import List, Optional
import json
import logging
import time
import uuid
from .database import create_db_and_tables, get_session
from . import services, models
from .auth import get_current_user, get_optional_user
from .exception_handlers import setup_exception_handlers
from .schemas import (
    MAX_INT,
    AnswerIn,
    BidIn,
    BidOut,
    ItemCreate,
    ItemDetails,
    ItemSummary,
    LoginIn,
    LoginOut,
    ProfileOut,
    QuestionIn,
    QuestionOut,
    SearchStatus,
    UserCreate,
)
from .utils.rate_limit import LoginThrottle
from .config import settings

app = FastAPI(title="Online Auction API")
api = APIRouter(prefix="/api")
logger = logging.getLogger("auction.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)
_login_throttle = LoginThrottle(settings.LOGIN_RATE_LIMIT_PER_MIN, settings.LOGIN_RATE_LIMIT_WINDOW_SECONDS)

# Wide-open CORS keeps local browser frontends working without extra config in dev.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

setup_exception_handlers(app)
create_db_and_tables()


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
                "client": request.client.host if request.client else "unknown",
            },
            ensure_ascii=True,
        ),
    )
    return response


def _enforce_login_throttle(request: Request) -> None:
    key = f"{request.client.host if request.client else 'unknown'}:{request.url.path}"
    _login_throttle.check(key)


@app.get("/")
def root():
    """Liveness message kept for existing clients."""
    return {"status": "Alive"}


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


@api.post('/users', status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_session)):
    """Create an account; the email must not be in use already."""
    user = services.AuthService(db).register(payload.first_name, payload.last_name, payload.email, payload.password)
    return {'user_id': user.user_id}


@api.post('/login', response_model=LoginOut)
def login(request: Request, payload: LoginIn, db: Session = Depends(get_session)):
    """Authenticate and return a session token for `X-Authorization`.

    Attempts are throttled per client address.
    """
    _enforce_login_throttle(request)
    return services.AuthService(db).login(payload.email, payload.password)


@api.post('/logout')
def logout(db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    """End the caller's session; its tokens stop working immediately."""
    services.AuthService(db).logout(user)
    return {'message': 'Logged out'}


@api.get('/users/{user_id}', response_model=ProfileOut)
def get_user_profile(user_id: int = Path(ge=1, le=MAX_INT), db: Session = Depends(get_session)):
    """Public profile with items selling, bid on and ended."""
    return services.ProfileService(db).get_profile(user_id)


@api.get('/search', response_model=List[ItemSummary])
def search_items(
    q: Optional[str] = None,
    status: Optional[SearchStatus] = None,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0, le=MAX_INT),
    db: Session = Depends(get_session),
    user: Optional[models.User] = Depends(get_optional_user),
):
    """Search items by text; `status` filters need a session token.

    `BID` lists items the caller bid on, `OPEN` the caller's open
    listings and `ARCHIVE` the caller's ended listings.
    """
    return services.ItemService(db).search(
        q, status.value if status else None, user, limit=limit, offset=offset
    )


@api.post('/item', status_code=201)
def create_item(payload: ItemCreate, db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    item = services.ItemService(db).create_item(
        user, payload.name, payload.description, payload.starting_bid, payload.end_date
    )
    return {'item_id': item.item_id}


@api.get('/item/{item_id}', response_model=ItemDetails)
def get_item(item_id: int = Path(ge=1, le=MAX_INT), db: Session = Depends(get_session)):
    """Item details with the seller and the current highest bid."""
    return services.ItemService(db).get_item(item_id)


@api.post('/item/{item_id}/bid', status_code=201)
def place_bid(payload: BidIn, item_id: int = Path(ge=1, le=MAX_INT), db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    """Bid on someone else's open item above the current highest bid."""
    services.BidService(db).place_bid(user, item_id, payload.amount)
    return {'message': 'Bid Received'}


@api.get('/item/{item_id}/bid', response_model=List[BidOut])
def bid_history(item_id: int = Path(ge=1, le=MAX_INT), db: Session = Depends(get_session)):
    return services.BidService(db).history(item_id)


@api.post('/item/{item_id}/question')
def ask_question(payload: QuestionIn, item_id: int = Path(ge=1, le=MAX_INT), db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    """Ask the seller a question; sellers cannot ask about their own item."""
    q = services.QuestionService(db).ask(user, item_id, payload.question_text)
    return {'question_id': q.question_id}


@api.get('/item/{item_id}/question', response_model=List[QuestionOut])
def list_questions(item_id: int = Path(ge=1, le=MAX_INT), db: Session = Depends(get_session)):
    """Questions on an item, newest first, with any answers."""
    return services.QuestionService(db).list_for_item(item_id)


@api.post('/question/{question_id}')
def answer_question(payload: AnswerIn, question_id: int = Path(ge=1, le=MAX_INT), db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    """Answer a question about one of the caller's own items."""
    services.QuestionService(db).answer(user, question_id, payload.answer_text)
    return {'message': 'Question answered successfully'}


app.include_router(api)
