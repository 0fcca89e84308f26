from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Index, Integer, String

from inventory_ai.database.base import Base


class InventoryCommit(Base):
    __tablename__ = "inventory_commits"

    id = Column(Integer, primary_key=True)
    request_id = Column(String(64), nullable=False, unique=True)
    product_id = Column(String(64), nullable=True)

    name = Column(String, nullable=False)
    cost = Column(Float, nullable=False)
    price = Column(Float, nullable=False)
    stock = Column(Integer, nullable=False)
    promotion = Column(Float, nullable=False, default=0)

    committed_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_inventory_commits_name", "name"),
    )


class SaleCommit(Base):
    __tablename__ = "sale_commits"

    id = Column(Integer, primary_key=True)
    request_id = Column(String(64), nullable=False, unique=True)

    product_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)

    # Snapshot of the sale as priced locally; empty for bare intents.
    sale_id = Column(String(64), nullable=True)
    product_id = Column(String(64), nullable=True)
    price_per_unit = Column(Float, nullable=True)
    promotion_applied = Column(Float, nullable=True)
    sale_date = Column(DateTime(timezone=True), nullable=True)

    committed_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_sale_commits_product", "product_name"),
    )


__all__ = ["InventoryCommit", "SaleCommit"]
