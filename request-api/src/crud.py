from typing import Optional

from sqlalchemy.orm import Session

from request_model import models
from request_model import schemas


def get_request(db: Session, request_id: int):
    return db.query(models.Request).filter(models.Request.id == request_id).first()


def get_requests(db: Session):
    return db.query(models.Request).order_by(models.Request.request_date.desc()).all()


def get_requests_by_emp_id(db: Session, emp_id: str):
    return (
        db.query(models.Request)
        .filter(models.Request.emp_id == emp_id)
        .order_by(models.Request.request_date.desc())
        .all()
    )


def get_active_request(db: Session, emp_id: str, program: str):
    return (
        db.query(models.Request)
        .filter(
            models.Request.emp_id == emp_id,
            models.Request.program == program,
            models.Request.status != schemas.StatusEnum.rejected.value,
        )
        .first()
    )


def create_request(
    db: Session, request: schemas.RequestCreate, document_path: Optional[str] = None
):
    db_request = models.Request(
        **request.model_dump(),
        status=schemas.StatusEnum.pending.value,
        document_path=document_path,
    )
    db.add(db_request)
    db.commit()
    db.refresh(db_request)
    return db_request


def update_request_status(db: Session, request_id: int, status: str):
    db_request = get_request(db, request_id)
    if db_request is None:
        return None
    db_request.status = status
    db.commit()
    db.refresh(db_request)
    return db_request
