from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    """Roles con acceso a la API"""
    EMPLOYEE = "employee"
    MODERATOR = "moderator"


class UserResponse(BaseModel):
    """Usuario autenticado extraído del token"""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="userID")
    role: UserRole
