import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, ValidationError
from models.user import User
from repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Service for managing user accounts."""

    def __init__(self, db: Session, user_repository: UserRepository):
        self.db = db
        self.user_repository = user_repository

    def create_user(self, email: str) -> User:
        email = (email or "").strip().lower()
        if not email:
            raise ValidationError("Email is required")
        if self.user_repository.get_by_email(email):
            raise ValidationError("A user with this email already exists")

        try:
            user = self.user_repository.create(email)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError("A user with this email already exists")

        self.db.refresh(user)
        logger.info(f"Created user {user.id}")
        return user

    def get_user(self, user_id: str) -> User:
        user = self.user_repository.get(user_id)
        if not user:
            raise NotFoundError("User")
        return user
