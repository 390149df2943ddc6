from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, Request, Response, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.settings import Settings, get_settings
from app.core.auth.dependencies import require_roles
from app.core.auth.schemas import UserResponse
from app.modules.pvz.service import PVZService
from app.modules.pvz.schemas import (
    PVZCreate, ReceptionCreate, ProductCreate,
    PVZ, PVZInfo, Reception, Product, UUID_PATTERN
)

router = APIRouter(tags=["PVZ"])


def get_pvz_service(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> PVZService:
    return PVZService(
        db,
        clock=request.app.state.clock,
        default_page=settings.default_page,
        default_limit=settings.default_limit
    )

# ===== MODERADOR =====

@router.post("/pvz", response_model=PVZ, status_code=status.HTTP_201_CREATED)
def create_pvz(
    request_data: PVZCreate,
    current_user: UserResponse = Depends(require_roles(["moderator"])),
    service: PVZService = Depends(get_pvz_service)
):
    """
    Registrar PVZ

    **Ciudades permitidas:** Москва, Санкт-Петербург, Казань
    """
    return service.create_pvz(request_data.city)


@router.get("/pvz", response_model=List[PVZInfo])
def get_pvz_list(
    start_date: Optional[str] = Query(None, alias="startDate", description="Inicio de ventana (RFC 3339)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Fin de ventana (RFC 3339)"),
    page: int = Query(0, ge=0, le=10_000_000, description="Página (base 1)"),
    limit: int = Query(0, ge=0, le=30, description="Elementos por página"),
    current_user: UserResponse = Depends(require_roles(["employee", "moderator"])),
    service: PVZService = Depends(get_pvz_service)
):
    """
    Listado de PVZ con recepciones y productos

    **Funcionalidad:**
    - Solo PVZ con al menos una recepción dentro de [startDate, endDate]
    - Recepciones filtradas por la ventana, productos completos
    - Paginación por fecha de registro del PVZ
    """
    return service.get_pvz_info(start_date, end_date, page, limit)

# ===== EMPLEADO =====

@router.post("/receptions", response_model=Reception, status_code=status.HTTP_201_CREATED)
def create_reception(
    request_data: ReceptionCreate,
    current_user: UserResponse = Depends(require_roles(["employee"])),
    service: PVZService = Depends(get_pvz_service)
):
    """
    Abrir recepción de mercancía

    **Validaciones:**
    - El PVZ debe existir
    - No puede haber otra recepción en curso en el PVZ
    """
    return service.open_reception(request_data.pvz_id)


@router.post("/products", response_model=Product, status_code=status.HTTP_201_CREATED)
def add_product(
    request_data: ProductCreate,
    current_user: UserResponse = Depends(require_roles(["employee"])),
    service: PVZService = Depends(get_pvz_service)
):
    """Agregar producto a la recepción en curso del PVZ"""
    return service.append_product(request_data.pvz_id, request_data.type)


@router.post("/pvz/{pvz_id}/close_last_reception", response_model=Reception)
def close_last_reception(
    pvz_id: str = Path(..., pattern=UUID_PATTERN, description="ID del PVZ (uuid)"),
    current_user: UserResponse = Depends(require_roles(["employee"])),
    service: PVZService = Depends(get_pvz_service)
):
    """Cerrar la recepción en curso; una recepción cerrada no se reabre"""
    return service.close_reception(pvz_id)


@router.post("/pvz/{pvz_id}/delete_last_product")
def delete_last_product(
    pvz_id: str = Path(..., pattern=UUID_PATTERN, description="ID del PVZ (uuid)"),
    current_user: UserResponse = Depends(require_roles(["employee"])),
    service: PVZService = Depends(get_pvz_service)
):
    """Eliminar el último producto agregado (LIFO) de la recepción en curso"""
    service.remove_last_product(pvz_id)
    return Response(status_code=status.HTTP_200_OK)
