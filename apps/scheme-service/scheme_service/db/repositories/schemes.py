"""
Scheme repository functions.

Implements create/read/update/delete for schemes and the ordered step
listing that joins each step to its scheme's name. Every write is
committed on its own and then confirmed with a separate read, so the
caller sees whatever the store filled in.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scheme_service.db import models

logger = logging.getLogger(__name__)

Payload = Union[BaseModel, Mapping[str, Any]]


def _as_dict(payload: Payload, *, exclude_unset: bool = False) -> dict:
    if isinstance(payload, BaseModel):
        return payload.model_dump(exclude_unset=exclude_unset)
    return dict(payload)


def find(db: Session) -> List[models.Scheme]:
    """All schemes in insertion order, without their steps."""
    return db.query(models.Scheme).order_by(models.Scheme.id).all()


def find_by_id(db: Session, scheme_id: int) -> Optional[models.Scheme]:
    return db.query(models.Scheme).filter(models.Scheme.id == scheme_id).first()


def find_steps(db: Session, scheme_id: int) -> List[dict]:
    """Steps of a scheme ordered by step number.

    Each entry carries the scheme's name rather than its id:
    ``{"id", "scheme_name", "step_number", "instructions"}``. Unknown
    schemes and schemes without steps both give an empty list.
    """
    rows = (
        db.query(
            models.Step.id,
            models.Scheme.scheme_name,
            models.Step.step_number,
            models.Step.instructions,
        )
        .select_from(models.Scheme)
        .join(models.Step, models.Step.scheme_id == models.Scheme.id)
        .filter(models.Scheme.id == scheme_id)
        .order_by(models.Step.step_number.asc(), models.Step.id.asc())
        .all()
    )
    return [dict(row._mapping) for row in rows]


def add(db: Session, scheme: Payload) -> Optional[models.Scheme]:
    db_scheme = models.Scheme(**_as_dict(scheme))
    try:
        db.add(db_scheme)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating scheme: {e}")
        raise
    scheme_id = db_scheme.id
    logger.info(f"Created scheme {scheme_id}")
    return find_by_id(db, scheme_id)


def update(db: Session, changes: Payload, scheme_id: int) -> Optional[models.Scheme]:
    """Apply a partial update and return the scheme as stored afterwards.

    A missing id is not an error: nothing is written and ``None`` comes
    back, as it would from ``find_by_id``.
    """
    values = _as_dict(changes, exclude_unset=True)
    if values:
        try:
            updated = (
                db.query(models.Scheme)
                .filter(models.Scheme.id == scheme_id)
                .update(values, synchronize_session=False)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating scheme {scheme_id}: {e}")
            raise
        if updated:
            logger.info(f"Updated scheme {scheme_id}: fields={sorted(values)}")
        else:
            logger.warning(f"Scheme {scheme_id} not found for update.")
    return find_by_id(db, scheme_id)


def remove(db: Session, scheme_id: int) -> Optional[models.Scheme]:
    """Delete a scheme and return it as it was just before deletion.

    The snapshot has to be read before the delete runs. It is detached
    from the session so the commit cannot expire it.
    """
    snapshot = find_by_id(db, scheme_id)
    if snapshot is not None:
        db.expunge(snapshot)
    try:
        deleted = (
            db.query(models.Scheme)
            .filter(models.Scheme.id == scheme_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting scheme {scheme_id}: {e}")
        raise
    if not deleted:
        logger.warning(f"Scheme {scheme_id} not found for deletion.")
        return None
    logger.info(f"Deleted scheme {scheme_id}")
    return snapshot


def add_step(db: Session, step: Payload, scheme_id: int) -> List[dict]:
    """Insert a step under ``scheme_id`` and return the scheme's full step list.

    ``scheme_id`` always wins over a ``scheme_id`` present in ``step``.
    """
    payload = _as_dict(step)
    payload["scheme_id"] = scheme_id
    db_step = models.Step(**payload)
    try:
        db.add(db_step)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error adding step to scheme {scheme_id}: {e}")
        raise
    logger.info(f"Added step {db_step.id} to scheme {scheme_id}")
    return find_steps(db, scheme_id)


# Steps
def find_step_by_id(db: Session, step_id: int) -> Optional[models.Step]:
    return db.query(models.Step).filter(models.Step.id == step_id).first()


def count_steps(db: Session, scheme_id: int) -> int:
    return (
        db.query(func.count(models.Step.id))
        .filter(models.Step.scheme_id == scheme_id)
        .scalar()
    )


def remove_step(db: Session, step_id: int) -> Optional[models.Step]:
    snapshot = find_step_by_id(db, step_id)
    if snapshot is not None:
        db.expunge(snapshot)
    try:
        deleted = (
            db.query(models.Step)
            .filter(models.Step.id == step_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting step {step_id}: {e}")
        raise
    if not deleted:
        logger.warning(f"Step {step_id} not found for deletion.")
        return None
    logger.info(f"Deleted step {step_id}")
    return snapshot


class SchemeRepository:
    """Scheme operations bound to one session.

    Holds no state besides the session; the caller opens and closes it.
    """

    def __init__(self, db: Session):
        self.db = db

    def find(self) -> List[models.Scheme]:
        return find(self.db)

    def find_by_id(self, scheme_id: int) -> Optional[models.Scheme]:
        return find_by_id(self.db, scheme_id)

    def find_steps(self, scheme_id: int) -> List[dict]:
        return find_steps(self.db, scheme_id)

    def add(self, scheme: Payload) -> Optional[models.Scheme]:
        return add(self.db, scheme)

    def update(self, changes: Payload, scheme_id: int) -> Optional[models.Scheme]:
        return update(self.db, changes, scheme_id)

    def remove(self, scheme_id: int) -> Optional[models.Scheme]:
        return remove(self.db, scheme_id)

    def add_step(self, step: Payload, scheme_id: int) -> List[dict]:
        return add_step(self.db, step, scheme_id)

    def find_step_by_id(self, step_id: int) -> Optional[models.Step]:
        return find_step_by_id(self.db, step_id)

    def count_steps(self, scheme_id: int) -> int:
        return count_steps(self.db, scheme_id)

    def remove_step(self, step_id: int) -> Optional[models.Step]:
        return remove_step(self.db, step_id)
