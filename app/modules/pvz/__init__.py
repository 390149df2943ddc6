# app/modules/pvz/__init__.py
"""
Módulo PVZ - Recepciones y Productos

Ciclo de vida de una recepción en un punto de entrega (PVZ):

- Registro de PVZ (moderador)
- Apertura de recepción: una sola en curso por PVZ
- Registro de productos en la recepción en curso
- Eliminación del último producto (LIFO)
- Cierre de recepción (terminal)
- Listado paginado de PVZ con recepciones y productos por ventana de fechas

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Orquestación (fechas, paginación, logging)
- repository.py: Operaciones transaccionales con bloqueo de filas
- history.py: Modelo de lectura en tres consultas
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as pvz_router
from .service import PVZService
from .repository import PVZRepository
from .history import PVZHistoryRepository

__all__ = [
    "pvz_router",
    "PVZService",
    "PVZRepository",
    "PVZHistoryRepository"
]
