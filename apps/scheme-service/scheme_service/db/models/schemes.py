from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from .base import Base


class Scheme(Base):
    __tablename__ = 'schemes'
    id = Column(Integer, primary_key=True, autoincrement=True)
    scheme_name = Column(String(128), nullable=False, unique=True)

    steps = relationship(
        "Step",
        back_populates="scheme",
        order_by="Step.step_number",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Scheme id={self.id} scheme_name={self.scheme_name!r}>"


class Step(Base):
    __tablename__ = 'steps'
    id = Column(Integer, primary_key=True, autoincrement=True)
    scheme_id = Column(
        Integer,
        ForeignKey('schemes.id', ondelete='CASCADE', onupdate='CASCADE'),
        nullable=False,
    )
    # Ordering within a scheme; uniqueness is left to the caller
    step_number = Column(Integer, nullable=False)
    instructions = Column(Text, nullable=False)

    scheme = relationship("Scheme", back_populates="steps")

    __table_args__ = (
        Index('idx_steps_scheme_id_step_number', 'scheme_id', 'step_number'),
    )

    def __repr__(self) -> str:
        return f"<Step id={self.id} scheme_id={self.scheme_id} step_number={self.step_number}>"
