# app/api/products.py

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.deps import MAX_ID, CallerIdentity, require_session_user
from app.core.product import create_product, get_product_or_404, product_view
from app.infra.postgres import get_db

router = APIRouter(prefix="/products")


class CreateProductSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: int = Field(..., ge=0)


@router.post("", status_code=201)
def create_product_endpoint(
    payload: CreateProductSchema,
    caller: CallerIdentity = Depends(require_session_user),
    db: Session = Depends(get_db),
):
    """Create a product (session login required)"""
    return product_view(create_product(db, payload.name, payload.price))


@router.get("/{product_id}")
def get_product_endpoint(product_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)):
    return product_view(get_product_or_404(db, product_id))
