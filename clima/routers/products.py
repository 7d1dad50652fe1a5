# clima/routers/products.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from clima.database import get_session
from clima.repositories.product_repo import ProductRepository
from clima.schemas.product import ProductCreate, ProductCreateResponse, ProductRead
from clima.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


@router.post(
    "",
    response_model=ProductCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Add a product.

    Required: nombre_producto, stock_disponible, precio.
    """
    product = service.add_product(session, payload)
    return ProductCreateResponse(
        message="Product added successfully.",
        product=ProductRead.model_validate(product, from_attributes=True),
    )
