"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories.
Services are intentionally thin: they perform the auction rules
(ownership, auction end time, highest bid) and persist rows via
repositories. Rule violations raise the errors from `errors`, which the
API layer maps to HTTP status codes.
"""

import json
import logging
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from passlib.context import CryptContext
import jwt
from sqlmodel import Session
from . import models, repositories
from .config import settings
from .errors import BadRequestError, ForbiddenError, NotFoundError, UnauthorizedError

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
logger = logging.getLogger("auction.services")


def now_ts() -> int:
    """Current time as integer UNIX seconds."""
    return int(time.time())


def _log_event(name: str, **fields) -> None:
    logger.info("%s %s", name, json.dumps(fields, ensure_ascii=True))


def item_summary(item: models.Item, seller: models.User) -> dict:
    """Shape used for search results and profile item lists."""
    return {
        'item_id': item.item_id,
        'name': item.name,
        'description': item.description,
        'end_date': item.end_date,
        'creator_id': item.creator_id,
        'first_name': seller.first_name,
        'last_name': seller.last_name,
    }


class AuthService:
    """Account creation and session token handling."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)

    def register(self, first_name: str, last_name: str, email: str, password: str) -> models.User:
        """Create a new user with a hashed password.

        Emails are unique; a second registration with the same email is
        rejected rather than returning the existing account.
        """
        if self.user_repo.get_by_email(email):
            raise BadRequestError("Cannot create user, email already in use")
        hashed = PWD_CTX.hash(password)
        u = models.User(first_name=first_name, last_name=last_name, email=email, password_hash=hashed)
        user = self.user_repo.create(u)
        _log_event("user_registered", user_id=user.user_id)
        return user

    def login(self, email: str, password: str) -> dict:
        """Verify credentials and return `{user_id, session_token}`.

        The token is a signed JWT holding the user id and the session id
        stored on the user row. Logging in again while a session is active
        reuses that session id, so earlier tokens stay valid until logout.
        """
        user = self.user_repo.get_by_email(email)
        if not user or not PWD_CTX.verify(password, user.password_hash):
            raise BadRequestError("Invalid email/password supplied")
        sid = user.session_token
        if not sid:
            sid = secrets.token_hex(16)
            self.user_repo.set_session_token(user, sid)
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.SESSION_EXPIRE_HOURS)
        payload = {"user_id": user.user_id, "sid": sid, "exp": int(expire.timestamp())}
        token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
        _log_event("login", user_id=user.user_id)
        return {'user_id': user.user_id, 'session_token': token}

    def logout(self, user: models.User) -> None:
        """Revoke the active session of `user`."""
        self.user_repo.set_session_token(user, None)
        _log_event("logout", user_id=user.user_id)

    def resolve(self, token: str) -> models.User:
        """Return the user owning `token` or raise `UnauthorizedError`.

        A token is accepted only while its signature and expiry are valid
        and its session id matches the one stored for the user.
        """
        try:
            payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Unauthorized - session token expired")
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Unauthorized - invalid or expired session token")
        user_id = payload.get('user_id')
        sid = payload.get('sid')
        if not user_id or not sid:
            raise UnauthorizedError("Unauthorized - invalid or expired session token")
        user = self.user_repo.get(user_id)
        if not user or not user.session_token or not secrets.compare_digest(user.session_token, sid):
            raise UnauthorizedError("Unauthorized - invalid or expired session token")
        return user


class ItemService:
    """List items for sale, show their details and search them."""
    def __init__(self, session: Session):
        self.session = session
        self.item_repo = repositories.ItemRepository(session)
        self.bid_repo = repositories.BidRepository(session)

    def create_item(self, user: models.User, name: str, description: str, starting_bid: int, end_date: int) -> models.Item:
        item = models.Item(
            name=name,
            description=description,
            starting_bid=starting_bid,
            start_date=now_ts(),
            end_date=end_date,
            creator_id=user.user_id,
        )
        created = self.item_repo.create(item)
        _log_event("item_created", item_id=created.item_id, creator_id=user.user_id, end_date=end_date)
        return created

    def get_item(self, item_id: int) -> dict:
        """Return item details with the seller name and current highest bid.

        With no bids yet, `current_bid` is the starting bid and
        `current_bid_holder` is `None`.
        """
        row = self.item_repo.get_with_seller(item_id)
        if not row:
            raise NotFoundError("Item not found")
        item, seller = row
        bids = self.bid_repo.history(item_id)
        current_bid = item.starting_bid
        holder = None
        if bids:
            top, bidder = bids[0]
            current_bid = top.amount
            holder = {'user_id': bidder.user_id, 'first_name': bidder.first_name, 'last_name': bidder.last_name}
        return {
            'item_id': item.item_id,
            'name': item.name,
            'description': item.description,
            'starting_bid': item.starting_bid,
            'start_date': item.start_date,
            'end_date': item.end_date,
            'creator_id': item.creator_id,
            'first_name': seller.first_name,
            'last_name': seller.last_name,
            'current_bid': current_bid,
            'current_bid_holder': holder,
        }

    def search(self, q: Optional[str], status: Optional[str], user: Optional[models.User], limit: int = 10, offset: int = 0) -> List[dict]:
        """Search items; a `status` filter needs an authenticated caller."""
        if status and user is None:
            raise BadRequestError("Authentication required to search for items")
        rows = self.item_repo.search(
            q=q,
            status=status,
            user_id=user.user_id if user else None,
            now=now_ts(),
            limit=limit,
            offset=offset,
        )
        return [item_summary(item, seller) for item, seller in rows]


class BidService:
    """Validate and record bids."""
    def __init__(self, session: Session):
        self.session = session
        self.item_repo = repositories.ItemRepository(session)
        self.bid_repo = repositories.BidRepository(session)

    def place_bid(self, user: models.User, item_id: int, amount: int) -> models.Bid:
        """Record a bid after checking ownership, end time and amount.

        The bid must be strictly greater than the current highest bid, or
        than the starting bid when the item has none.
        """
        item = self.item_repo.get(item_id)
        if not item:
            raise NotFoundError("Item not found")
        if item.creator_id == user.user_id:
            raise ForbiddenError("Cannot bid on your own item")
        timestamp = now_ts()
        if timestamp > item.end_date:
            raise BadRequestError("Auction has already ended")
        highest = self.bid_repo.highest(item_id)
        current = highest if highest is not None else item.starting_bid
        if amount <= current:
            raise BadRequestError("Bid too low")
        bid = self.bid_repo.create(models.Bid(item_id=item_id, user_id=user.user_id, amount=amount, timestamp=timestamp))
        _log_event("bid_placed", item_id=item_id, user_id=user.user_id, amount=amount)
        return bid

    def history(self, item_id: int) -> List[dict]:
        """Bids for an existing item, highest first."""
        if not self.item_repo.get(item_id):
            raise NotFoundError("Item not found")
        return [
            {
                'item_id': bid.item_id,
                'amount': bid.amount,
                'timestamp': bid.timestamp,
                'user_id': bidder.user_id,
                'first_name': bidder.first_name,
                'last_name': bidder.last_name,
            }
            for bid, bidder in self.bid_repo.history(item_id)
        ]


class QuestionService:
    """Questions from buyers and answers from the seller."""
    def __init__(self, session: Session):
        self.session = session
        self.item_repo = repositories.ItemRepository(session)
        self.question_repo = repositories.QuestionRepository(session)

    def ask(self, user: models.User, item_id: int, question_text: str) -> models.Question:
        item = self.item_repo.get(item_id)
        if not item:
            raise NotFoundError("Item not found")
        if item.creator_id == user.user_id:
            raise ForbiddenError("You cannot ask a question on your own item")
        q = self.question_repo.create(models.Question(item_id=item_id, asked_by=user.user_id, question=question_text))
        _log_event("question_asked", question_id=q.question_id, item_id=item_id, user_id=user.user_id)
        return q

    def list_for_item(self, item_id: int) -> List[dict]:
        if not self.item_repo.get(item_id):
            raise NotFoundError("Item not found")
        return [
            {'question_id': q.question_id, 'question_text': q.question, 'answer_text': q.answer}
            for q in self.question_repo.list_for_item(item_id)
        ]

    def answer(self, user: models.User, question_id: int, answer_text: str) -> models.Question:
        """Answer a question; only the seller of the item may do so."""
        question = self.question_repo.get(question_id)
        if not question:
            raise NotFoundError("Question not found")
        item = self.item_repo.get(question.item_id)
        if not item:
            raise NotFoundError("Item not found")
        if item.creator_id != user.user_id:
            raise ForbiddenError("Only the seller can answer questions on their items")
        answered = self.question_repo.answer(question, answer_text)
        _log_event("question_answered", question_id=question_id, item_id=item.item_id)
        return answered


class ProfileService:
    """Aggregate a user's public profile."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)
        self.item_repo = repositories.ItemRepository(session)

    def get_profile(self, user_id: int) -> dict:
        """Return the user's name with items selling, bid on and ended."""
        user = self.user_repo.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        now = now_ts()
        return {
            'user_id': user.user_id,
            'first_name': user.first_name,
            'last_name': user.last_name,
            'selling': [item_summary(i, s) for i, s in self.item_repo.selling(user_id, now)],
            'bidding_on': [item_summary(i, s) for i, s in self.item_repo.bidding_on(user_id, now)],
            'auctions_ended': [item_summary(i, s) for i, s in self.item_repo.ended_for_seller(user_id, now)],
        }
