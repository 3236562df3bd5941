"""Appointment model definitions."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String
from medbook.database import Base


class Appointment(Base):
    """Represents a booking between a patient and a doctor."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(String, nullable=False)  # HH:MM
    end_time = Column(String, nullable=False)  # HH:MM
    status = Column(String, default="scheduled")
    reason = Column(String)
    notes = Column(String, default="")
    created_by = Column(String)  # patient/doctor
    created_at = Column(DateTime, default=datetime.now)
