import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .entities import Entity
from .errors import IdMismatchError, NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def _storage(db: Session, action: str) -> Iterator[None]:
    # Storage failures are fatal for the request: roll back, log, surface as 500.
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error while %s", action)
        raise PersistenceError(f"Database error while {action}") from exc


def _exists(db: Session, model, row_id: Any) -> bool:
    return db.query(model.id).filter(model.id == row_id).first() is not None


def _require_parent(db: Session, entity: Entity, parent_id: Optional[int]) -> None:
    if not entity.is_nested:
        return
    if not _exists(db, entity.parent.model, parent_id):
        logger.warning("%s with ID %s not found.", entity.parent.name, parent_id)
        raise NotFoundError(f"{entity.parent.name} with ID {parent_id} not found.")


def _require_references(db: Session, entity: Entity, payload: BaseModel) -> None:
    for field, target in entity.references:
        value = getattr(payload, field)
        if not _exists(db, target.model, value):
            logger.warning("%s with ID %s referenced by %s not found.", target.name, value, entity.name)
            raise NotFoundError(f"{target.name} with ID {value} not found.")


def _query(db: Session, entity: Entity, parent_id: Optional[int]):
    q = db.query(entity.model)
    if entity.is_nested:
        q = q.filter(getattr(entity.model, entity.parent_field) == parent_id)
    return q


def _get(db: Session, entity: Entity, row_id: int, parent_id: Optional[int]):
    row = _query(db, entity, parent_id).filter(entity.model.id == row_id).first()
    if row is None:
        if entity.is_nested:
            logger.warning("%s with ID %s not found in %s %s.", entity.name, row_id, entity.parent.name, parent_id)
        else:
            logger.warning("%s with ID %s not found.", entity.name, row_id)
        raise NotFoundError(f"{entity.name} with ID {row_id} not found.")
    return row


def list_all(db: Session, entity: Entity, parent_id: Optional[int] = None) -> List[Any]:
    with _storage(db, f"listing {entity.name}"):
        _require_parent(db, entity, parent_id)
        return _query(db, entity, parent_id).order_by(entity.model.id).all()


def get_by_id(db: Session, entity: Entity, row_id: int, parent_id: Optional[int] = None):
    with _storage(db, f"retrieving {entity.name} {row_id}"):
        _require_parent(db, entity, parent_id)
        return _get(db, entity, row_id, parent_id)


def create(db: Session, entity: Entity, payload: BaseModel, parent_id: Optional[int] = None):
    with _storage(db, f"creating {entity.name}"):
        _require_parent(db, entity, parent_id)
        _require_references(db, entity, payload)
        row = entity.from_dto(payload)
        if entity.is_nested:
            setattr(row, entity.parent_field, parent_id)
        db.add(row)
        db.commit()
        db.refresh(row)
        logger.info("%s with ID %s created.", entity.name, row.id)
        return row


def replace(db: Session, entity: Entity, row_id: int, payload: BaseModel, parent_id: Optional[int] = None):
    """Full-replacement update.

    The body must carry the same id as the URL; that is checked before
    anything is read.  Submitted fields overwrite the stored ones and the
    parent link always follows the URL.
    """
    if payload.id != row_id:
        logger.warning("Mismatched %s ID in URL and body. URL ID: %s, Body ID: %s", entity.name, row_id, payload.id)
        raise IdMismatchError()

    with _storage(db, f"updating {entity.name} {row_id}"):
        _require_parent(db, entity, parent_id)
        row = _get(db, entity, row_id, parent_id)
        _require_references(db, entity, payload)
        entity.apply(payload, row)
        if entity.is_nested:
            setattr(row, entity.parent_field, parent_id)
        db.commit()
        db.refresh(row)
        logger.info("%s with ID %s updated.", entity.name, row_id)
        return row


def delete(db: Session, entity: Entity, row_id: int, parent_id: Optional[int] = None) -> None:
    with _storage(db, f"deleting {entity.name} {row_id}"):
        _require_parent(db, entity, parent_id)
        row = _get(db, entity, row_id, parent_id)
        db.delete(row)
        db.commit()
        logger.info("%s with ID %s deleted.", entity.name, row_id)
