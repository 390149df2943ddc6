from sqlalchemy import Column, String, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.config.database import Base

# ===== TABLAS BASE =====

class PickupPoint(Base):
    """Modelo de Punto de Entrega (PVZ)"""
    __tablename__ = "pvz"

    id = Column(String(36), primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    city = Column(String(64), nullable=False)

    # Relationships
    receptions = relationship("Reception", back_populates="pvz")

    def __repr__(self) -> str:
        return f"<PickupPoint {self.id} {self.city}>"

class User(Base):
    """Modelo de Usuario"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

# ===== RECEPCIONES =====

class Reception(Base):
    """Modelo de Recepción de mercancía en un PVZ"""
    __tablename__ = "receptions"

    id = Column(String(36), primary_key=True)
    pvz_id = Column(String(36), ForeignKey("pvz.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(String(32), nullable=False)

    # Una sola recepción in_progress por PVZ
    __table_args__ = (
        Index(
            "uq_receptions_pvz_in_progress",
            "pvz_id",
            unique=True,
            postgresql_where=text("status = 'in_progress'"),
            sqlite_where=text("status = 'in_progress'"),
        ),
    )

    # Relationships
    pvz = relationship("PickupPoint", back_populates="receptions")
    products = relationship(
        "Product",
        back_populates="reception",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

class Product(Base):
    """Modelo de Producto registrado dentro de una recepción"""
    __tablename__ = "products"

    id = Column(String(36), primary_key=True)
    reception_id = Column(
        String(36),
        ForeignKey("receptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    type = Column(String(64), nullable=False)

    # Relationships
    reception = relationship("Reception", back_populates="products")
