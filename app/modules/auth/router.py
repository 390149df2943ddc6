from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.settings import Settings, get_settings
from app.modules.auth.schemas import (
    DummyLoginRequest, RegisterRequest, LoginRequest, UserCreatedResponse
)
from app.modules.auth.service import AuthService

router = APIRouter(tags=["Authentication"])


@router.post("/dummyLogin", response_model=str)
def dummy_login(
    request_data: DummyLoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Obtener token de prueba para el rol indicado

    **Roles:** employee, moderator
    """
    service = AuthService(db, settings)
    return service.dummy_login(request_data.role)


@router.post("/register", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
def register(
    request_data: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Registrar usuario con email, contraseña y rol"""
    service = AuthService(db, settings)
    return service.register(request_data.email, request_data.password, request_data.role)


@router.post("/login", response_model=str)
def login(
    request_data: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Login; devuelve JWT con el rol del usuario"""
    service = AuthService(db, settings)
    return service.login(request_data.email, request_data.password)
