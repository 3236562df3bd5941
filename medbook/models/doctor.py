"""Doctor model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, JSON, String
from medbook.database import Base


class Doctor(Base):
    """Represents a doctor's profile and weekly working window.

    A doctor shares its primary key with the ``users`` row used to log in.
    """
    __tablename__ = "doctors"

    id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    name = Column(String)
    specialization = Column(String)
    phone = Column(String)
    license_number = Column(String, unique=True)
    working_hours_start = Column(String, nullable=False)  # HH:MM
    working_hours_end = Column(String, nullable=False)  # HH:MM
    working_days = Column(JSON, nullable=False, default=list)
