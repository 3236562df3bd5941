"""Account rows shared by patients, doctors and administrators."""

from sqlalchemy import Column, Integer, String
from medbook.database import Base


class User(Base):
    """A login identity. Doctors also own a row in ``doctors`` with the same id."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False, default="")
    hashed_password = Column(String)
    role = Column(String, nullable=False, default="patient")  # patient/doctor/admin
