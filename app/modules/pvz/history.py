import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List

from sqlalchemy import and_, asc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StoreUnavailableError
from app.modules.pvz.schemas import (
    PVZ, PVZInfo, Reception as ReceptionRecord,
    Product as ProductRecord, ReceptionWithProducts
)
from app.shared.database.models import PickupPoint, Reception, Product

logger = logging.getLogger(__name__)


class PVZHistoryRepository:
    """
    Modelo de lectura: PVZ -> recepciones en ventana -> productos.

    Se arma con tres consultas (página de PVZ, sus recepciones, sus productos)
    y se une en memoria, sin N+1 ni filas duplicadas por JOIN. Lecturas sin
    bloqueo: el resultado es una foto puntual, no consistente con escrituras
    concurrentes.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_pvz_info(self, start: datetime, end: datetime, page: int, limit: int) -> List[PVZInfo]:
        """Página de PVZ con al menos una recepción dentro de [start, end]"""
        in_window = and_(Reception.created_at >= start, Reception.created_at <= end)

        try:
            pvz_rows = self.db.query(PickupPoint).filter(
                PickupPoint.receptions.any(in_window)
            ).order_by(
                asc(PickupPoint.created_at), asc(PickupPoint.id)
            ).limit(limit).offset((page - 1) * limit).all()
        except SQLAlchemyError as e:
            logger.error(f"select pvz page failed: {e}")
            raise StoreUnavailableError(f"select pvz: {e}") from e

        if not pvz_rows:
            return []

        pvz_ids = [pvz.id for pvz in pvz_rows]

        try:
            reception_rows = self.db.query(Reception).filter(
                Reception.pvz_id.in_(pvz_ids),
                in_window
            ).order_by(asc(Reception.created_at), asc(Reception.id)).all()
        except SQLAlchemyError as e:
            logger.error(f"select receptions failed: {e}")
            raise StoreUnavailableError(f"select receptions: {e}") from e

        reception_ids = [reception.id for reception in reception_rows]

        # Productos: sin filtro de ventana
        try:
            product_rows = self.db.query(Product).filter(
                Product.reception_id.in_(reception_ids)
            ).order_by(asc(Product.created_at), asc(Product.id)).all() if reception_ids else []
        except SQLAlchemyError as e:
            logger.error(f"select products failed: {e}")
            raise StoreUnavailableError(f"select products: {e}") from e

        return self._stitch(pvz_rows, reception_rows, product_rows)

    def _stitch(self, pvz_rows, reception_rows, product_rows) -> List[PVZInfo]:
        products_by_reception: Dict[str, List[ProductRecord]] = defaultdict(list)
        for product in product_rows:
            products_by_reception[product.reception_id].append(ProductRecord.model_validate(product))

        receptions_by_pvz: Dict[str, List[ReceptionWithProducts]] = defaultdict(list)
        for reception in reception_rows:
            receptions_by_pvz[reception.pvz_id].append(
                ReceptionWithProducts(
                    reception=ReceptionRecord.model_validate(reception),
                    products=products_by_reception.get(reception.id, [])
                )
            )

        return [
            PVZInfo(
                pvz=PVZ.model_validate(pvz),
                receptions=receptions_by_pvz.get(pvz.id, [])
            )
            for pvz in pvz_rows
        ]
