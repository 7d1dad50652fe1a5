# clima/schemas/product.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from pydantic_core import PydanticCustomError
from sqlmodel import SQLModel, Field


class ProductCreate(SQLModel):
    """
    Payload for adding a product.

    - nombre_producto, stock_disponible, precio are required
    - stock_disponible may be 0; precio may not
    """

    model_config = ConfigDict(extra="ignore")

    nombre_producto: str = Field(max_length=255)
    descripcion_producto: str | None = None
    stock_disponible: int
    tipo: str | None = Field(default=None, max_length=50)
    color: str | None = Field(default=None, max_length=50)
    precio: float

    @field_validator("nombre_producto")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise PydanticCustomError("missing", "Field required")
        return v

    @field_validator("precio")
    @classmethod
    def price_present(cls, v: float) -> float:
        if not v:
            raise PydanticCustomError("missing", "Field required")
        return v


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: int
    nombre_producto: str
    descripcion_producto: str | None = None
    stock_disponible: int
    tipo: str | None = None
    color: str | None = None
    precio: float
    created_at: datetime | None = None


class ProductCreateResponse(SQLModel):
    message: str
    product: ProductRead
