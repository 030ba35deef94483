# app/routers/products.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.exceptions import EditConflict, PersistenceFailure
from app.core.principal import get_current_principal
from app.models.categories import Category
from app.models.products import Product
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
)
from app.services.stock import RESTOCK, record_stock_change
from app.services.transactional import commit_edit

router = APIRouter(
    prefix="/products",
    tags=["Products"],
)


def _require_category(db: Session, category_id: str):
    category = db.query(Category).filter(Category.id == category_id).first()

    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )


def _get_product_or_404(db: Session, product_id: str) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )

    return product


def _commit(db: Session, label: str):
    try:
        commit_edit(db, label=label)

    except EditConflict as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)

    except PersistenceFailure:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save product",
        )


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
):
    _require_category(db, product_data.category_id)

    product = Product(
        name=product_data.name,
        category_id=product_data.category_id,
        price=product_data.price,
        stock=0,
        low_stock_threshold=product_data.low_stock_threshold,
        barcode=product_data.barcode,
        description=product_data.description,
        is_active=product_data.is_active,
    )

    db.add(product)
    db.flush()

    # Opening stock goes through the inventory log like any other restock
    if product_data.stock > 0:
        record_stock_change(db, product, product_data.stock, RESTOCK, "Initial stock", principal)

    _commit(db, f"Create product {product.name}")
    db.refresh(product)

    return product


@router.get("/low-stock", response_model=list[ProductResponse])
def list_low_stock_products(
    db: Session = Depends(get_db),
):
    products = (
        db.query(Product)
        .filter(
            Product.is_active == True,
            Product.stock <= Product.low_stock_threshold,
        )
        .order_by(Product.created_at.desc())
        .all()
    )

    return products


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    db: Session = Depends(get_db),
):
    return _get_product_or_404(db, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
):
    product = _get_product_or_404(db, product_id)

    if product_data.category_id is not None:
        _require_category(db, product_data.category_id)
        product.category_id = product_data.category_id

    if product_data.name is not None:
        product.name = product_data.name

    if product_data.price is not None:
        product.price = product_data.price

    if product_data.low_stock_threshold is not None:
        product.low_stock_threshold = product_data.low_stock_threshold

    if product_data.barcode is not None:
        product.barcode = product_data.barcode

    if product_data.description is not None:
        product.description = product_data.description

    if product_data.is_active is not None:
        product.is_active = product_data.is_active

    _commit(db, f"Update product {product_id}")
    db.refresh(product)

    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
):
    product = _get_product_or_404(db, product_id)

    db.delete(product)
    _commit(db, f"Delete product {product_id}")

    return None
