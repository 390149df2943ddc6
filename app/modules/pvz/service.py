import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from app.core.exceptions import PVZServiceError, InvalidDateFormatError
from app.modules.pvz.history import PVZHistoryRepository
from app.modules.pvz.repository import PVZRepository
from app.modules.pvz.schemas import (
    City, ProductType, PVZ, PVZInfo, Reception, Product
)
from app.shared.clock import Clock

logger = logging.getLogger(__name__)

# Inicio de ventana cuando no se especifica startDate
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def parse_timestamp(field: str, value: str) -> datetime:
    """Parsear RFC 3339; valores sin zona se interpretan como UTC"""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00").replace("z", "+00:00"))
        if parsed.tzinfo is None or parsed.utcoffset() is None:
            return parsed.replace(tzinfo=timezone.utc)
        # Un offset puede sacar el instante del rango de datetime
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError) as e:
        raise InvalidDateFormatError(field, value) from e


class PVZService:

    def __init__(self, db: Session, clock: Optional[Clock] = None,
                 default_page: int = DEFAULT_PAGE, default_limit: int = DEFAULT_LIMIT):
        self.db = db
        self.clock = clock or Clock()
        self.default_page = default_page
        self.default_limit = default_limit
        self.repository = PVZRepository(db, self.clock)
        self.history = PVZHistoryRepository(db)

    # ===== PVZ =====

    def create_pvz(self, city: Union[City, str]) -> PVZ:
        pvz = self.repository.create_pvz(city)
        logger.info(f"PVZ {pvz.id} creado en {pvz.city.value}")
        return pvz

    def get_pvz_info(self, start_date: Optional[str] = None, end_date: Optional[str] = None,
                     page: Optional[int] = 0, limit: Optional[int] = 0) -> List[PVZInfo]:
        """Listado paginado de PVZ con recepciones y productos dentro de la ventana"""
        page = page or self.default_page
        limit = limit or self.default_limit

        start = parse_timestamp("startDate", start_date) if start_date else ZERO_TIME
        end = parse_timestamp("endDate", end_date) if end_date else self.clock.now()

        return self.history.get_pvz_info(start, end, page, limit)

    # ===== RECEPCIONES =====

    def open_reception(self, pvz_id: str) -> Reception:
        try:
            reception = self.repository.open_reception(pvz_id)
        except PVZServiceError as e:
            logger.warning(f"No se pudo abrir recepción en PVZ {pvz_id}: {e.kind} - {e.message}")
            raise
        logger.info(f"Recepción {reception.id} abierta en PVZ {pvz_id}")
        return reception

    def close_reception(self, pvz_id: str) -> Reception:
        try:
            reception = self.repository.close_reception(pvz_id)
        except PVZServiceError as e:
            logger.warning(f"No se pudo cerrar recepción en PVZ {pvz_id}: {e.kind} - {e.message}")
            raise
        logger.info(f"Recepción {reception.id} cerrada en PVZ {pvz_id}")
        return reception

    # ===== PRODUCTOS =====

    def append_product(self, pvz_id: str, product_type: Union[ProductType, str]) -> Product:
        try:
            product = self.repository.append_product(pvz_id, product_type)
        except PVZServiceError as e:
            logger.warning(f"No se pudo agregar producto en PVZ {pvz_id}: {e.kind} - {e.message}")
            raise
        logger.info(f"Producto {product.id} ({product.type.value}) agregado a recepción {product.reception_id}")
        return product

    def remove_last_product(self, pvz_id: str) -> None:
        try:
            self.repository.remove_last_product(pvz_id)
        except PVZServiceError as e:
            logger.warning(f"No se pudo eliminar producto en PVZ {pvz_id}: {e.kind} - {e.message}")
            raise
        logger.info(f"Último producto eliminado en PVZ {pvz_id}")
