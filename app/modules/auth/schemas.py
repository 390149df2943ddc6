from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.auth.schemas import UserRole

# ===== REQUEST SCHEMAS =====

class DummyLoginRequest(BaseModel):
    """Token de prueba para un rol"""
    role: UserRole = Field(..., description="Rol: employee o moderator")

class RegisterRequest(BaseModel):
    """Registro de usuario"""
    email: EmailStr = Field(..., description="Email único del usuario")
    password: str = Field(..., min_length=1, description="Contraseña")
    role: UserRole = Field(..., description="Rol del usuario")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

class LoginRequest(BaseModel):
    """Login con email y contraseña"""
    email: EmailStr
    password: str = Field(..., min_length=1)

# ===== RESPONSE SCHEMAS =====

class UserCreatedResponse(BaseModel):
    """Usuario registrado"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: UserRole
