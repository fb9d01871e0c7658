from pydantic import BaseModel, ConfigDict


class SchemeBase(BaseModel):
    scheme_name: str


class SchemeCreate(SchemeBase):
    pass


class SchemeUpdate(BaseModel):
    scheme_name: str | None = None


class Scheme(SchemeBase):
    id: int
    model_config = ConfigDict(from_attributes=True)


class StepBase(BaseModel):
    step_number: int
    instructions: str


class StepCreate(StepBase):
    # Ignored on insert: the target scheme id always comes from the caller
    scheme_id: int | None = None


class Step(StepBase):
    id: int
    scheme_id: int
    model_config = ConfigDict(from_attributes=True)


class SchemeStep(BaseModel):
    """A step as listed for its scheme, carrying the scheme's name instead of its id."""
    id: int
    scheme_name: str
    step_number: int
    instructions: str
    model_config = ConfigDict(from_attributes=True)
