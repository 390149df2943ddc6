# app/modules/auth/__init__.py
"""
Módulo de Autenticación

- POST /dummyLogin: token de prueba por rol
- POST /register: registro de usuario (bcrypt)
- POST /login: login con email y contraseña

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Emisión de tokens y verificación de contraseñas
- repository.py: Acceso a datos de usuarios
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as auth_router
from .service import AuthService
from .repository import UserRepository

__all__ = [
    "auth_router",
    "AuthService",
    "UserRepository"
]
