# app/routers/inventory.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.exceptions import InvalidStockChange, PersistenceFailure, ProductNotFound
from app.core.principal import get_current_principal
from app.schemas.inventory import (
    RestockCreate,
    StockAdjustmentCreate,
    StockChangeResponse,
)
from app.services.stock import adjust_stock, restock

router = APIRouter(
    prefix="/inventory",
    tags=["Inventory"],
)


def _apply(change):
    try:
        product, log = change()

    except ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")

    except InvalidStockChange as exc:
        raise HTTPException(status_code=400, detail=exc.message)

    except PersistenceFailure:
        raise HTTPException(status_code=500, detail="Failed to update stock")

    return {"product_id": product.id, "stock": product.stock, "log": log}


@router.post("/{product_id}/restock", response_model=StockChangeResponse, status_code=201)
def restock_product(
    product_id: str,
    restock_data: RestockCreate,
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
):
    return _apply(
        lambda: restock(db, product_id, restock_data.quantity, restock_data.reason, principal)
    )


@router.post("/{product_id}/adjust", response_model=StockChangeResponse, status_code=201)
def adjust_product_stock(
    product_id: str,
    adjustment_data: StockAdjustmentCreate,
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
):
    return _apply(
        lambda: adjust_stock(
            db,
            product_id,
            adjustment_data.quantity_change,
            adjustment_data.reason,
            principal,
        )
    )
