"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (users,
items, bids, questions). Repositories return SQLModel objects, or
`(row, seller)` tuples for the joined listing queries, and perform
commits/refreshes where appropriate.
"""

from typing import List, Optional, Tuple
from sqlmodel import Session, select, col
from sqlalchemy import func, or_
from . import models

ItemWithSeller = Tuple[models.Item, models.User]
BidWithBidder = Tuple[models.Bid, models.User]


class UserRepository:
    """CRUD operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return a `User` by email or `None` if not found."""
        stmt = select(models.User).where(models.User.email == email)
        return self.session.exec(stmt).first()

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)

    def set_session_token(self, user: models.User, session_token: Optional[str]) -> models.User:
        """Store (or clear, with `None`) the active session id of `user`."""
        user.session_token = session_token
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user


class ItemRepository:
    """Queries over listed items, always joined with the seller row."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, item: models.Item) -> models.Item:
        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        return item

    def get(self, item_id: int) -> Optional[models.Item]:
        """Fetch an item by id."""
        return self.session.get(models.Item, item_id)

    def _with_seller(self):
        return select(models.Item, models.User).join(
            models.User, models.Item.creator_id == models.User.user_id
        )

    def get_with_seller(self, item_id: int) -> Optional[ItemWithSeller]:
        """Return `(item, seller)` or `None` if the item does not exist."""
        stmt = self._with_seller().where(models.Item.item_id == item_id)
        return self.session.exec(stmt).first()

    def _bid_on_by(self, user_id: int):
        return col(models.Item.item_id).in_(
            select(models.Bid.item_id).where(models.Bid.user_id == user_id)
        )

    def search(
        self,
        q: Optional[str] = None,
        status: Optional[str] = None,
        user_id: Optional[int] = None,
        now: int = 0,
        limit: int = 10,
        offset: int = 0,
    ) -> List[ItemWithSeller]:
        """Search items by free text and an optional caller-scoped status.

        `q` matches a substring of the name or description. `status` is
        one of `BID` (items `user_id` has bid on), `OPEN` (items `user_id`
        sells that are still open) or `ARCHIVE` (items `user_id` sold whose
        auction ended before `now`). Results are ordered by `item_id`.
        """
        stmt = self._with_seller()
        if q:
            stmt = stmt.where(or_(
                col(models.Item.name).contains(q, autoescape=True),
                col(models.Item.description).contains(q, autoescape=True),
            ))
        if status == "BID":
            stmt = stmt.where(self._bid_on_by(user_id))
        elif status == "OPEN":
            stmt = stmt.where(models.Item.creator_id == user_id, models.Item.end_date >= now)
        elif status == "ARCHIVE":
            stmt = stmt.where(models.Item.creator_id == user_id, models.Item.end_date < now)
        stmt = stmt.order_by(models.Item.item_id).offset(offset).limit(limit)
        return self.session.exec(stmt).all()

    def selling(self, user_id: int, now: int) -> List[ItemWithSeller]:
        """Open items listed by `user_id`."""
        stmt = self._with_seller().where(
            models.Item.creator_id == user_id, models.Item.end_date >= now
        ).order_by(models.Item.end_date, models.Item.item_id)
        return self.session.exec(stmt).all()

    def ended_for_seller(self, user_id: int, now: int) -> List[ItemWithSeller]:
        """Items listed by `user_id` whose auction has ended."""
        stmt = self._with_seller().where(
            models.Item.creator_id == user_id, models.Item.end_date < now
        ).order_by(col(models.Item.end_date).desc(), models.Item.item_id)
        return self.session.exec(stmt).all()

    def bidding_on(self, user_id: int, now: int) -> List[ItemWithSeller]:
        """Distinct open items `user_id` has placed at least one bid on."""
        stmt = self._with_seller().where(
            self._bid_on_by(user_id), models.Item.end_date >= now
        ).order_by(models.Item.end_date, models.Item.item_id)
        return self.session.exec(stmt).all()


class BidRepository:
    """Persist bids and rank them per item."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, bid: models.Bid) -> models.Bid:
        self.session.add(bid)
        self.session.commit()
        self.session.refresh(bid)
        return bid

    def history(self, item_id: int) -> List[BidWithBidder]:
        """Return `(bid, bidder)` rows for `item_id`, highest amount first.

        Equal amounts keep the earliest bid first.
        """
        stmt = (
            select(models.Bid, models.User)
            .join(models.User, models.Bid.user_id == models.User.user_id)
            .where(models.Bid.item_id == item_id)
            .order_by(col(models.Bid.amount).desc(), models.Bid.timestamp, models.Bid.bid_id)
        )
        return self.session.exec(stmt).all()

    def highest(self, item_id: int) -> Optional[int]:
        """Highest bid amount on `item_id`, or `None` when no bid exists."""
        stmt = select(func.max(models.Bid.amount)).where(models.Bid.item_id == item_id)
        return self.session.exec(stmt).one()


class QuestionRepository:
    """CRUD operations for item questions and their answers."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, question: models.Question) -> models.Question:
        self.session.add(question)
        self.session.commit()
        self.session.refresh(question)
        return question

    def get(self, question_id: int) -> Optional[models.Question]:
        return self.session.get(models.Question, question_id)

    def list_for_item(self, item_id: int) -> List[models.Question]:
        """List questions for `item_id`, newest first."""
        stmt = (
            select(models.Question)
            .where(models.Question.item_id == item_id)
            .order_by(col(models.Question.question_id).desc())
        )
        return self.session.exec(stmt).all()

    def answer(self, question: models.Question, answer_text: str) -> models.Question:
        """Store (or overwrite) the seller's answer on `question`."""
        question.answer = answer_text
        self.session.add(question)
        self.session.commit()
        self.session.refresh(question)
        return question
