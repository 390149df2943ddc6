from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App Info
    app_name: str = "PVZ Intake API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./pvz.db"

    # Security
    secret_key: str = Field(default="change-me", description="Clave para firmar JWT")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 10080  # 1 week

    # CORS
    allowed_origins: List[str] = ["http://localhost:3000", "http://localhost:8080"]

    # Pagination
    default_page: int = Field(default=1, description="Página usada cuando page llega en 0")
    default_limit: int = Field(default=10, description="Tamaño de página usado cuando limit llega en 0")

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
