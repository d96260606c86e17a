from datetime import datetime
from typing import List
from pydantic import Field

from .base import CamelModel


class ChatMessageCreate(CamelModel):
    """Schema for asking a question."""
    question: str = Field(..., description="Question to send to the assistant")


class ChatMessageResponse(CamelModel):
    """Schema for returning a stored question/answer pair."""
    id: str
    user_id: str
    question: str
    answer: str
    tokens: int
    created_at: datetime


class ChatHistoryResponse(CamelModel):
    messages: List[ChatMessageResponse]
