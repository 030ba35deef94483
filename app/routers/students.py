# app/routers/students.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.exceptions import (
    EditConflict,
    InvalidBalanceAdjustment,
    PersistenceFailure,
    StudentNotFound,
)
from app.core.principal import get_current_principal
from app.models.students import Student
from app.schemas.student import (
    BalanceAdjustmentCreate,
    StudentBalanceResponse,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
)
from app.services.balance import adjust_balance
from app.services.transactional import commit_edit

router = APIRouter(
    prefix="/students",
    tags=["Students"],
)

DUPLICATE_ROLL_NUMBER = "Student with this roll number already exists"


def _get_student_or_404(db: Session, student_id: str) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()

    if not student:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found",
        )

    return student


def _ensure_roll_number_free(db: Session, roll_number: str, exclude_id: str | None = None):
    query = db.query(Student).filter(Student.roll_number == roll_number)
    if exclude_id:
        query = query.filter(Student.id != exclude_id)

    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=DUPLICATE_ROLL_NUMBER,
        )


def _commit(db: Session, label: str):
    try:
        commit_edit(db, label=label, duplicate_message=DUPLICATE_ROLL_NUMBER)

    except EditConflict as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)

    except PersistenceFailure:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save student",
        )


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_student(
    student_data: StudentCreate,
    db: Session = Depends(get_db),
):
    _ensure_roll_number_free(db, student_data.roll_number)

    student = Student(
        name=student_data.name,
        roll_number=student_data.roll_number,
        standard=student_data.standard,
        year=student_data.year,
        balance=student_data.balance,
        status=student_data.status,
    )

    db.add(student)
    _commit(db, f"Create student {student_data.roll_number}")
    db.refresh(student)

    return student


@router.get("/roll/{roll_number}", response_model=StudentResponse)
def get_student_by_roll_number(
    roll_number: str,
    db: Session = Depends(get_db),
):
    student = db.query(Student).filter(Student.roll_number == roll_number).first()

    if not student:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found",
        )

    return student


@router.get("/{student_id}", response_model=StudentResponse)
def get_student(
    student_id: str,
    db: Session = Depends(get_db),
):
    return _get_student_or_404(db, student_id)


@router.put("/{student_id}", response_model=StudentResponse)
def update_student(
    student_id: str,
    student_data: StudentUpdate,
    db: Session = Depends(get_db),
):
    student = _get_student_or_404(db, student_id)

    if student_data.roll_number is not None and student_data.roll_number != student.roll_number:
        _ensure_roll_number_free(db, student_data.roll_number, exclude_id=student.id)
        student.roll_number = student_data.roll_number

    if student_data.name is not None:
        student.name = student_data.name

    if student_data.standard is not None:
        student.standard = student_data.standard

    if student_data.year is not None:
        student.year = student_data.year

    if student_data.status is not None:
        student.status = student_data.status

    _commit(db, f"Update student {student_id}")
    db.refresh(student)

    return student


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(
    student_id: str,
    db: Session = Depends(get_db),
):
    student = _get_student_or_404(db, student_id)

    db.delete(student)
    _commit(db, f"Delete student {student_id}")

    return None


# =========================================================
# BALANCE TOP-UP / DEDUCTION
# =========================================================
@router.patch("/{student_id}/balance", response_model=StudentBalanceResponse)
def update_balance(
    student_id: str,
    adjustment_data: BalanceAdjustmentCreate,
    db: Session = Depends(get_db),
    principal: str = Depends(get_current_principal),
):
    try:
        student, adjustment = adjust_balance(
            db,
            student_id,
            adjustment_data.amount,
            adjustment_data.reason,
            principal,
        )

    except StudentNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

    except InvalidBalanceAdjustment as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)

    except PersistenceFailure:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update balance",
        )

    return {"student": student, "adjustment": adjustment}
