# =========================================================
# TRANSACTIONS ROUTER
#
# POST settles a cart against a student's prepaid balance.
# Validation and commit live in app.services.settlement;
# this layer only maps outcomes to HTTP responses:
# - 404: student or product not found
# - 400: insufficient stock / balance, invalid cart
# - 500: anything else (no internal detail exposed)
# =========================================================

import logging

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.config import settings
from app.core.exceptions import NotFound, PersistenceFailure, SettlementError
from app.core.principal import get_current_principal
from app.core.rate_limiter import limiter
from app.models.sales import Sale
from app.schemas.sale import SaleCreate, SaleResponse
from app.services.settlement import LineItem, settle

logger = logging.getLogger("app")

router = APIRouter(prefix="/transactions", tags=["Transactions"])


# =========================================================
# CREATE TRANSACTION
# =========================================================
@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.SALES_RATE_LIMIT)
def create_transaction(
    request: Request,
    sale_data: SaleCreate,
    db: Session = Depends(get_db),
    seller_id: str = Depends(get_current_principal),
):
    items = [
        LineItem(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.price,
        )
        for item in sale_data.items
    ]

    try:
        return settle(db, sale_data.student_ref, items, seller_id)

    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)

    except PersistenceFailure:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process transaction",
        )

    except SettlementError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)

    except Exception:
        logger.exception("Unexpected error while settling a transaction")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process transaction",
        )


# =========================================================
# GET SINGLE TRANSACTION
# =========================================================
@router.get("/{transaction_id}", response_model=SaleResponse)
def get_transaction(
    transaction_id: str,
    db: Session = Depends(get_db),
):
    sale = db.query(Sale).filter(Sale.id == transaction_id).first()

    if not sale:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Transaction not found",
        )

    return sale
