# clima/models/product.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product entry in the hosted `producto` table.

    Column names follow the existing table:
      - nombre_producto, descripcion_producto, stock_disponible,
        tipo, color, precio
    """

    __tablename__ = "producto"

    id: int | None = Field(default=None, primary_key=True)

    nombre_producto: str = Field(
        index=True,
        description="Display name of the product",
    )

    descripcion_producto: str | None = Field(default=None)

    stock_disponible: int = Field(
        description="Units currently in stock",
    )

    tipo: str | None = Field(default=None)

    color: str | None = Field(default=None)

    precio: float = Field(description="Unit price")

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
