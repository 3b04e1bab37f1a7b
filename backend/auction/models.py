"""SQLModel data models.

This module defines the auction tables. Timestamps on items and bids are
integer UNIX seconds, matching what clients send and receive.
"""

from typing import Optional
from sqlmodel import SQLModel, Field
import time


class User(SQLModel, table=True):
    """A registered user.

    Fields:
    - `email`: unique login name
    - `password_hash`: hashed password string (never store plaintext)
    - `session_token`: id of the active login session, `None` when logged out
    """
    __tablename__ = "users"

    user_id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    email: str = Field(index=True, nullable=False, unique=True)
    password_hash: str
    session_token: Optional[str] = Field(default=None, index=True)
    created_at: int = Field(default_factory=lambda: int(time.time()))


class Item(SQLModel, table=True):
    """An item listed for auction by `creator_id`."""
    __tablename__ = "items"

    item_id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: str
    starting_bid: int
    start_date: int
    end_date: int = Field(index=True)
    creator_id: int = Field(foreign_key="users.user_id", index=True)


class Bid(SQLModel, table=True):
    """A single bid placed by `user_id` on `item_id`."""
    __tablename__ = "bids"

    bid_id: Optional[int] = Field(default=None, primary_key=True)
    item_id: int = Field(foreign_key="items.item_id", index=True)
    user_id: int = Field(foreign_key="users.user_id", index=True)
    amount: int
    timestamp: int


class Question(SQLModel, table=True):
    """A question asked about an item; `answer` is filled in by the seller."""
    __tablename__ = "questions"

    question_id: Optional[int] = Field(default=None, primary_key=True)
    item_id: int = Field(foreign_key="items.item_id", index=True)
    asked_by: int = Field(foreign_key="users.user_id")
    question: str
    answer: Optional[str] = None
