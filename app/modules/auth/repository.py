from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StoreUnavailableError, UserAlreadyExistsError
from app.shared.clock import new_id
from app.shared.database.models import User


class UserRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Obtener usuario por email"""
        try:
            return self.db.query(User).filter(User.email == email).first()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"select user: {e}") from e

    def create_user(self, email: str, password_hash: str, role: str) -> User:
        """Crear usuario; el email es único"""
        if self.get_user_by_email(email) is not None:
            raise UserAlreadyExistsError(email)

        try:
            user = User(id=new_id(), email=email, password_hash=password_hash, role=role)
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError as e:
            self.db.rollback()
            raise UserAlreadyExistsError(email) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(f"insert user: {e}") from e
