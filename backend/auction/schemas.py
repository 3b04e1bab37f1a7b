"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and carry the field limits
enforced on every request body. Validation failures are reported as
HTTP 400 by the exception handlers.
"""

import time
from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from .config import settings

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
# largest integer JSON clients can represent exactly; also fits SQLite INTEGER
MAX_INT = 2**53 - 1


class UserCreate(BaseModel):
    """Payload for account creation."""
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)


class LoginIn(BaseModel):
    """Payload for the login endpoint."""
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginOut(BaseModel):
    """Authentication response containing the session token."""
    user_id: int
    session_token: str


class ItemCreate(BaseModel):
    """Request format for listing a new item."""
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    starting_bid: int = Field(gt=0, le=MAX_INT)
    end_date: int = Field(le=MAX_INT)

    @field_validator("end_date")
    @classmethod
    def _end_date_in_future(cls, v: int) -> int:
        earliest = int(time.time()) + settings.MIN_AUCTION_SECONDS
        if v < earliest:
            raise ValueError(f"end_date must be at least {settings.MIN_AUCTION_SECONDS} seconds in the future")
        return v


class BidIn(BaseModel):
    amount: int = Field(gt=0, le=MAX_INT)


class QuestionIn(BaseModel):
    question_text: str = Field(min_length=1, max_length=500)


class AnswerIn(BaseModel):
    answer_text: str = Field(min_length=1, max_length=500)


class SearchStatus(str, Enum):
    """Status filters for item search; all of them are scoped to the caller."""
    BID = "BID"
    OPEN = "OPEN"
    ARCHIVE = "ARCHIVE"


class BidderOut(BaseModel):
    user_id: int
    first_name: str
    last_name: str


class ItemSummary(BaseModel):
    """Item shape used by search results and profile lists."""
    item_id: int
    name: str
    description: str
    end_date: int
    creator_id: int
    first_name: str
    last_name: str


class ItemDetails(BaseModel):
    item_id: int
    name: str
    description: str
    starting_bid: int
    start_date: int
    end_date: int
    creator_id: int
    first_name: str
    last_name: str
    current_bid: int
    current_bid_holder: Optional[BidderOut] = None


class BidOut(BaseModel):
    item_id: int
    amount: int
    timestamp: int
    user_id: int
    first_name: str
    last_name: str


class QuestionOut(BaseModel):
    question_id: int
    question_text: str
    answer_text: Optional[str] = None


class ProfileOut(BaseModel):
    """Public profile with the three item lists aggregated per user."""
    user_id: int
    first_name: str
    last_name: str
    selling: List[ItemSummary]
    bidding_on: List[ItemSummary]
    auctions_ended: List[ItemSummary]
