import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from ai.services.ai_service import AIService
from config import settings
from core.exceptions import NotFoundError, ValidationError
from models.chat_message import ChatMessage
from repositories.chat_message_repository import ChatMessageRepository
from repositories.user_repository import UserRepository
from services.quota_service import QuotaService
from utils.time import utcnow

logger = logging.getLogger(__name__)


class ChatService:
    """Runs a chat exchange: quota check, synthetic answer, persisted message."""

    def __init__(
        self,
        db: Session,
        message_repository: ChatMessageRepository,
        user_repository: UserRepository,
        quota_service: QuotaService,
        ai_service: AIService,
    ):
        self.db = db
        self.message_repository = message_repository
        self.user_repository = user_repository
        self.quota_service = quota_service
        self.ai_service = ai_service

    def record(self, user_id: str, question: str, answer: str, tokens: int) -> ChatMessage:
        return self.message_repository.create(user_id, question, answer, tokens)

    def send_message(self, user_id: str, question: str, now: Optional[datetime] = None) -> ChatMessage:
        """
        Debit one message of quota and store the answered question.

        The answer is generated before any row is written, so the write
        transaction never spans the model latency. The debit and the stored
        message are committed together; if recording fails, the debit is
        rolled back as well.
        """
        if question is None or not str(question).strip():
            raise ValidationError("Question is required and must be a non-empty string")
        question = str(question).strip()

        if not self.user_repository.exists(user_id):
            raise NotFoundError("User")

        now = now or utcnow()
        self.quota_service.check_allowed(user_id, now)
        completion = self.ai_service.generate(question)

        # Quota is evaluated again here; it may have been spent meanwhile.
        try:
            decision = self.quota_service.consume(user_id, now)
            message = self.record(user_id, question, completion.answer, completion.tokens)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(message)
        logger.info(
            f"Stored message {message.id} for user {user_id} "
            f"(source={decision.debit_source.kind.value}, tokens={message.tokens})"
        )
        return message

    def get_history(self, user_id: str, limit: Optional[int] = None) -> List[ChatMessage]:
        limit = limit or settings.DEFAULT_HISTORY_LIMIT
        return self.message_repository.find_by_user(user_id, limit)

    def get_by_id(self, message_id: str) -> ChatMessage:
        message = self.message_repository.get(message_id)
        if not message:
            raise NotFoundError("Message")
        return message
