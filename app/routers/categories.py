# app/routers/categories.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.exceptions import EditConflict, PersistenceFailure
from app.models.categories import Category
from app.schemas.category import CategoryCreate, CategoryResponse
from app.services.transactional import commit_edit

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
)

DUPLICATE_NAME = "Category with this name already exists"


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
):
    existing_category = db.query(Category).filter(Category.name == category_data.name).first()
    if existing_category:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=DUPLICATE_NAME,
        )

    category = Category(
        name=category_data.name,
        description=category_data.description,
    )

    db.add(category)

    try:
        commit_edit(db, label=f"Create category {category.name}", duplicate_message=DUPLICATE_NAME)

    except EditConflict as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)

    except PersistenceFailure:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save category",
        )

    db.refresh(category)

    return category


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: str,
    db: Session = Depends(get_db),
):
    category = db.query(Category).filter(Category.id == category_id).first()

    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )

    return category
