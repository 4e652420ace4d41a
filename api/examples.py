# api/examples.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from auth_service.database import get_db
from auth_service.errors import not_found
from auth_service.models import Example
from auth_service.schemas import is_blank

from .schemas import ExampleCreate, ExampleUpdate

example_router = APIRouter(prefix="/examples", tags=["Examples"])

REQUIRED_FIELDS = ("name", "status")


def _get_example(db: Session, example_id: int):
    example = db.get(Example, example_id)
    if example is None:
        raise not_found("Example not found")
    return example


@example_router.get("")
def list_examples(db: Session = Depends(get_db)):
    return [e.to_dict() for e in db.query(Example).order_by(Example.id).all()]


@example_router.get("/{example_id}")
def get_example(example_id: int, db: Session = Depends(get_db)):
    return _get_example(db, example_id).to_dict()


@example_router.post("", status_code=status.HTTP_201_CREATED)
def create_example(data: ExampleCreate, db: Session = Depends(get_db)):
    example = Example(**data.model_dump())
    db.add(example)
    db.commit()
    db.refresh(example)
    return example.to_dict()


@example_router.put("/{example_id}")
def update_example(example_id: int, data: ExampleUpdate, db: Session = Depends(get_db)):
    example = _get_example(db, example_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if field in REQUIRED_FIELDS and is_blank(value):
            continue
        setattr(example, field, value)
    db.commit()
    db.refresh(example)
    return example.to_dict()


@example_router.delete("/{example_id}")
def delete_example(example_id: int, db: Session = Depends(get_db)):
    example = _get_example(db, example_id)
    db.delete(example)
    db.commit()
    return {"message": "Example deleted"}
