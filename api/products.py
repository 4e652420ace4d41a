# api/products.py
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from auth_service.database import get_db
from auth_service.errors import not_found
from auth_service.models import Product
from auth_service.schemas import is_blank
from auth_service.security import admin_required

from .schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)

product_router = APIRouter(prefix="/products", tags=["Products"])

REQUIRED_FIELDS = ("name", "price", "currency")


def _get_product(db: Session, product_id: int):
    product = db.get(Product, product_id)
    if product is None:
        raise not_found("Product not found")
    return product


@product_router.get("")
def list_products(db: Session = Depends(get_db)):
    return [p.to_dict() for p in db.query(Product).order_by(Product.id).all()]


@product_router.get("/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _get_product(db, product_id).to_dict()


@product_router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(admin_required)])
def create_product(data: ProductCreate, db: Session = Depends(get_db)):
    product = Product(
        name=data.name,
        price=data.price,
        description=data.description,
        image_url=data.image_url,
        currency=data.currency or "usd",
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Product %s created (id=%s).", product.name, product.id)
    return product.to_dict()


@product_router.put("/{product_id}", dependencies=[Depends(admin_required)])
def update_product(product_id: int, data: ProductUpdate, db: Session = Depends(get_db)):
    product = _get_product(db, product_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        # Required columns keep their value when sent empty
        if field in REQUIRED_FIELDS and is_blank(value):
            continue
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    return product.to_dict()


@product_router.delete("/{product_id}", dependencies=[Depends(admin_required)])
def delete_product(product_id: int, db: Session = Depends(get_db)):
    product = _get_product(db, product_id)
    db.delete(product)
    db.commit()
    logger.info("Product %s removed.", product_id)
    return {"message": "Product removed"}
