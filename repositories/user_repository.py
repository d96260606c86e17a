from typing import Optional
from sqlalchemy.orm import Session

from models.user import User


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def exists(self, user_id: str) -> bool:
        return self.db.query(User.id).filter(User.id == user_id).first() is not None

    def create(self, email: str) -> User:
        user = User(email=email)
        self.db.add(user)
        self.db.flush()
        return user
