# clima/repositories/product_repo.py
from sqlmodel import Session

from clima.models.product import Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations.
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product
