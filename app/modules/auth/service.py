import logging

from sqlalchemy.orm import Session

from app.config.settings import Settings
from app.core.auth.schemas import UserRole
from app.core.auth.security import create_access_token, hash_password, verify_password
from app.core.exceptions import InvalidCredentialsError
from app.modules.auth.repository import UserRepository
from app.modules.auth.schemas import UserCreatedResponse

logger = logging.getLogger(__name__)


class AuthService:

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.repository = UserRepository(db)

    def dummy_login(self, role: UserRole) -> str:
        """Token sin usuario asociado, solo con el rol"""
        return create_access_token(role.value, None, self.settings)

    def register(self, email: str, password: str, role: UserRole) -> UserCreatedResponse:
        user = self.repository.create_user(email, hash_password(password), role.value)
        logger.info(f"Usuario {user.id} registrado con rol {user.role}")
        return UserCreatedResponse.model_validate(user)

    def login(self, email: str, password: str) -> str:
        user = self.repository.get_user_by_email(email.lower())
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        return create_access_token(user.role, user.id, self.settings)
