# clima/services/product_service.py
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from clima.core.errors import ValidationError, require_fields
from clima.models.product import Product
from clima.repositories.product_repo import ProductRepository
from clima.schemas.product import ProductCreate

logger = logging.getLogger(__name__)


class ProductService:
    """
    Business logic for Product.

    Only insertion is exposed; there is no update or delete.
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def add_product(self, session: Session, payload: ProductCreate) -> Product:
        """
        Insert one product row.

        Raises:
            ValidationError: name, stock or price missing, or the store
                rejected the row.
        """
        require_fields(
            nombre_producto=payload.nombre_producto,
            stock_disponible=payload.stock_disponible,
            precio=payload.precio or None,
        )

        product = Product(
            nombre_producto=payload.nombre_producto,
            descripcion_producto=payload.descripcion_producto,
            stock_disponible=payload.stock_disponible,
            tipo=payload.tipo,
            color=payload.color,
            precio=payload.precio,
        )
        try:
            product = self.repo.create(session, product)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Product insert failed: %s", exc)
            raise ValidationError(str(getattr(exc, "orig", exc))) from exc

        logger.info("Added product id=%s", product.id)
        return product
