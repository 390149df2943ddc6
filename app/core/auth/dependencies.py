import logging
from typing import List, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from app.config.settings import Settings, get_settings
from app.core.auth.schemas import UserResponse, UserRole
from app.core.auth.security import InvalidTokenError, decode_access_token

logger = logging.getLogger(__name__)

ACCESS_DENIED = "access is denied"

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings)
) -> UserResponse:
    """Usuario del token Bearer; 403 si falta o es inválido"""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_DENIED)

    try:
        claims = decode_access_token(credentials.credentials, settings)
        return UserResponse.model_validate(claims)
    except (InvalidTokenError, ValidationError) as e:
        logger.info(f"Token rechazado: {e}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_DENIED)


def require_roles(allowed_roles: List[str]):
    """Dependency que exige uno de los roles indicados"""
    allowed = {UserRole(role) for role in allowed_roles}

    def role_checker(current_user: UserResponse = Depends(get_current_user)) -> UserResponse:
        if current_user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_DENIED)
        return current_user

    return role_checker
