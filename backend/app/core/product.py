# app/core/product.py

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import DB_ERROR_MESSAGE, NotFoundError, ServerError
from app.models.product import Product

logger = logging.getLogger(__name__)


def product_view(product: Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "price": product.price,
        "createdAt": product.created_at.isoformat() if product.created_at else None,
        "updatedAt": product.updated_at.isoformat() if product.updated_at else None,
    }


def create_product(db: Session, name: str, price: int) -> Product:
    product = Product(name=name, price=price)
    try:
        db.add(product)
        db.commit()
        db.refresh(product)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Creating product %r failed", name)
        raise ServerError(DB_ERROR_MESSAGE)
    return product


def get_product(db: Session, product_id: int) -> Optional[Product]:
    return db.get(Product, product_id)


def get_product_or_404(db: Session, product_id: int) -> Product:
    product = get_product(db, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product
