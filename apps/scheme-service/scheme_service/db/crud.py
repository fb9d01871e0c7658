"""
CRUD operations for ORM models.

Facade over the repository modules so callers have one import point.
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from . import models
from .repositories import schemes as repo_schemes
from .repositories.schemes import Payload


# CRUD for Scheme (facade delegates to repository)
def get_schemes(db: Session) -> List[models.Scheme]:
    return repo_schemes.find(db)


def get_scheme(db: Session, scheme_id: int) -> Optional[models.Scheme]:
    return repo_schemes.find_by_id(db, scheme_id)


def get_scheme_steps(db: Session, scheme_id: int) -> List[dict]:
    return repo_schemes.find_steps(db, scheme_id)


def create_scheme(db: Session, scheme: Payload) -> Optional[models.Scheme]:
    return repo_schemes.add(db, scheme)


def update_scheme(db: Session, scheme_id: int, changes: Payload) -> Optional[models.Scheme]:
    return repo_schemes.update(db, changes, scheme_id)


def delete_scheme(db: Session, scheme_id: int) -> Optional[models.Scheme]:
    return repo_schemes.remove(db, scheme_id)


# CRUD for Step
def create_step(db: Session, scheme_id: int, step: Payload) -> List[dict]:
    return repo_schemes.add_step(db, step, scheme_id)


def get_step(db: Session, step_id: int) -> Optional[models.Step]:
    return repo_schemes.find_step_by_id(db, step_id)


def delete_step(db: Session, step_id: int) -> Optional[models.Step]:
    return repo_schemes.remove_step(db, step_id)
