"""
SQLAlchemy models for schemes and their ordered steps.
"""

from .base import Base  # re-export
from .schemes import Scheme, Step

__all__ = [
    "Base",
    "Scheme",
    "Step",
]
