# app/api/v1/router.py
from fastapi import APIRouter, Request

from app.modules.auth import auth_router
from app.modules.pvz import pvz_router

# Router principal de la API
api_router = APIRouter()

# ==================== RUTAS ====================

# Autenticación: /dummyLogin, /register, /login
api_router.include_router(auth_router)

# PVZ, recepciones y productos
api_router.include_router(pvz_router)


@api_router.get("/health")
def health_check(request: Request):
    """Health check endpoint"""
    settings = request.app.state.settings
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.version,
        "modules": {
            "auth": {"status": "active", "features": ["JWT", "Roles"]},
            "pvz": {"status": "active", "features": ["Receptions", "Products", "History"]}
        }
    }
