"""
Pydantic schemas for schemes and steps.
"""

from .schemes import (
    SchemeBase,
    SchemeCreate,
    SchemeUpdate,
    Scheme,
    StepBase,
    StepCreate,
    Step,
    SchemeStep,
)

__all__ = [
    "SchemeBase",
    "SchemeCreate",
    "SchemeUpdate",
    "Scheme",
    "StepBase",
    "StepCreate",
    "Step",
    "SchemeStep",
]
