from typing import List, Optional
from sqlalchemy.orm import Session

from models.chat_message import ChatMessage


class ChatMessageRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: str, question: str, answer: str, tokens: int) -> ChatMessage:
        message = ChatMessage(
            user_id=user_id,
            question=question,
            answer=answer,
            tokens=tokens,
        )
        self.db.add(message)
        self.db.flush()
        return message

    def find_by_user(self, user_id: str, limit: int = 50) -> List[ChatMessage]:
        return (
            self.db.query(ChatMessage)
            .filter(ChatMessage.user_id == user_id)
            .order_by(ChatMessage.created_at.desc())
            .limit(limit)
            .all()
        )

    def get(self, message_id: str) -> Optional[ChatMessage]:
        return self.db.query(ChatMessage).filter(ChatMessage.id == message_id).first()
