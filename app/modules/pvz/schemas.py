from datetime import datetime
from typing import List
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from enum import Enum

from app.shared.clock import utc_millis

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"

# ===== ENUMS =====

class City(str, Enum):
    MOSCOW = "Москва"
    SAINT_PETERSBURG = "Санкт-Петербург"
    KAZAN = "Казань"

class ReceptionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    CLOSED = "close"

class ProductType(str, Enum):
    ELECTRONICS = "электроника"
    CLOTHES = "одежда"
    SHOES = "обувь"

# ===== REQUEST SCHEMAS =====

class PVZCreate(BaseModel):
    """Schema para crear PVZ"""
    city: City = Field(..., description="Ciudad del PVZ")

class ReceptionCreate(BaseModel):
    """Schema para abrir recepción"""
    model_config = ConfigDict(populate_by_name=True)

    pvz_id: str = Field(..., alias="pvzId", pattern=UUID_PATTERN, description="ID del PVZ (uuid)")

class ProductCreate(BaseModel):
    """Schema para agregar producto a la recepción activa"""
    model_config = ConfigDict(populate_by_name=True)

    type: ProductType = Field(..., description="Tipo de producto")
    pvz_id: str = Field(..., alias="pvzId", pattern=UUID_PATTERN, description="ID del PVZ (uuid)")

# ===== RESPONSE SCHEMAS =====

class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

class PVZ(_Record):
    """PVZ registrado"""
    id: str
    registration_date: datetime = Field(..., alias="registrationDate",
                                        validation_alias=AliasChoices("created_at", "registrationDate", "registration_date"))
    city: City

    @field_validator("registration_date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return utc_millis(value)

class Reception(_Record):
    """Recepción de mercancía"""
    id: str
    date_time: datetime = Field(..., alias="dateTime", validation_alias=AliasChoices("created_at", "dateTime", "date_time"))
    pvz_id: str = Field(..., alias="pvzId", validation_alias=AliasChoices("pvz_id", "pvzId"))
    status: ReceptionStatus

    @field_validator("date_time")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return utc_millis(value)

class Product(_Record):
    """Producto registrado en una recepción"""
    id: str
    date_time: datetime = Field(..., alias="dateTime", validation_alias=AliasChoices("created_at", "dateTime", "date_time"))
    type: ProductType
    reception_id: str = Field(..., alias="receptionId", validation_alias=AliasChoices("reception_id", "receptionId"))

    @field_validator("date_time")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return utc_millis(value)

class ReceptionWithProducts(BaseModel):
    """Recepción con sus productos en orden de registro"""
    reception: Reception
    products: List[Product] = Field(default_factory=list)

class PVZInfo(BaseModel):
    """PVZ con sus recepciones dentro de la ventana consultada"""
    pvz: PVZ
    receptions: List[ReceptionWithProducts] = Field(default_factory=list)
