import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional, Union

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    PVZServiceError, PVZNotFoundError, ReceptionInProgressError,
    NoActiveReceptionError, NoProductsInReceptionError,
    TransactionStartError, TransactionCommitError, StoreUnavailableError
)
from app.modules.pvz.schemas import (
    City, ProductType, ReceptionStatus,
    PVZ, Reception as ReceptionRecord, Product as ProductRecord
)
from app.shared.clock import Clock, new_id
from app.shared.database.models import PickupPoint, Reception, Product

logger = logging.getLogger(__name__)


def _enum_value(value: Union[Enum, str]) -> str:
    return value.value if isinstance(value, Enum) else str(value)


class PVZRepository:
    """
    Operaciones transaccionales sobre PVZ, recepciones y productos.

    Cada operación abre su propia transacción, toma bloqueos de fila
    (SELECT ... FOR UPDATE) acotados a un PVZ y hace commit antes de
    retornar. Cualquier error hace rollback antes de propagarse.
    """

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or Clock()

    # ===== TRANSACCIONES =====

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        """Begin/commit con rollback garantizado en cualquier salida por error"""
        try:
            if not self.db.in_transaction():
                self.db.begin()
            # Forzar la conexión para que un fallo de BEGIN se reporte aquí
            self.db.connection()
        except SQLAlchemyError as e:
            logger.error(f"{operation}: failed to begin transaction: {e}")
            self.db.rollback()
            raise TransactionStartError() from e

        try:
            yield self.db
        except PVZServiceError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{operation}: store error: {e}")
            raise StoreUnavailableError(f"{operation}: {e}") from e
        except BaseException:
            # Cancelaciones / timeouts: nunca dejar la transacción abierta
            self.db.rollback()
            raise

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{operation}: failed to commit transaction: {e}")
            raise TransactionCommitError() from e

    def _lock_active_reception(self, pvz_id: str) -> Reception:
        """Ubicar y bloquear la recepción in_progress más reciente del PVZ"""
        reception = self.db.query(Reception).filter(
            Reception.pvz_id == pvz_id,
            Reception.status == ReceptionStatus.IN_PROGRESS.value
        ).order_by(
            desc(Reception.created_at)
        ).with_for_update().populate_existing().first()

        if reception is None:
            raise NoActiveReceptionError()
        return reception

    # ===== PVZ =====

    def create_pvz(self, city: Union[City, str]) -> PVZ:
        """Registrar un nuevo PVZ"""
        with self._transaction("create pvz"):
            pvz = PickupPoint(
                id=new_id(),
                created_at=self.clock.now(),
                city=_enum_value(city)
            )
            self.db.add(pvz)
            self.db.flush()
            record = PVZ.model_validate(pvz)
        return record

    # ===== RECEPCIONES =====

    def open_reception(self, pvz_id: str) -> ReceptionRecord:
        """Abrir recepción; falla si el PVZ no existe o ya hay una en curso"""
        with self._transaction("open reception"):
            # El bloqueo sobre la fila del PVZ serializa aperturas concurrentes
            pvz = self.db.query(PickupPoint).filter(
                PickupPoint.id == pvz_id
            ).with_for_update().populate_existing().first()
            if pvz is None:
                raise PVZNotFoundError()

            active = self.db.query(Reception.id).filter(
                Reception.pvz_id == pvz_id,
                Reception.status == ReceptionStatus.IN_PROGRESS.value
            ).with_for_update().first()
            if active is not None:
                raise ReceptionInProgressError()

            reception = Reception(
                id=new_id(),
                pvz_id=pvz_id,
                created_at=self.clock.now(),
                status=ReceptionStatus.IN_PROGRESS.value
            )
            self.db.add(reception)
            try:
                self.db.flush()
            except IntegrityError as e:
                # uq_receptions_pvz_in_progress: otra apertura ganó la carrera
                raise ReceptionInProgressError() from e
            record = ReceptionRecord.model_validate(reception)
        return record

    def close_reception(self, pvz_id: str) -> ReceptionRecord:
        """Cerrar la recepción en curso (transición terminal)"""
        with self._transaction("close reception"):
            reception = self._lock_active_reception(pvz_id)
            reception.status = ReceptionStatus.CLOSED.value
            self.db.flush()
            record = ReceptionRecord.model_validate(reception)
        return record

    # ===== PRODUCTOS =====

    def append_product(self, pvz_id: str, product_type: Union[ProductType, str]) -> ProductRecord:
        """Agregar producto a la recepción en curso del PVZ"""
        with self._transaction("append product"):
            reception = self._lock_active_reception(pvz_id)
            product = Product(
                id=new_id(),
                reception_id=reception.id,
                created_at=self.clock.now(),
                type=_enum_value(product_type)
            )
            self.db.add(product)
            self.db.flush()
            record = ProductRecord.model_validate(product)
        return record

    def remove_last_product(self, pvz_id: str) -> None:
        """Eliminar el último producto registrado (LIFO) de la recepción en curso"""
        with self._transaction("remove last product"):
            reception = self._lock_active_reception(pvz_id)
            product = self.db.query(Product).filter(
                Product.reception_id == reception.id
            ).order_by(
                desc(Product.created_at)
            ).with_for_update().first()
            if product is None:
                raise NoProductsInReceptionError()

            self.db.delete(product)
            self.db.flush()
