"""
Relational models for services, working hours and appointments.
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String
from sqlalchemy.sql import func

from bela360.infrastructure.database.session import Base


def generate_id() -> str:
    return str(uuid.uuid4())


class ServiceModel(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=generate_id)
    business_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=True)
    duration = Column(Integer, nullable=False)  # minutes


class WorkingHoursModel(Base):
    __tablename__ = "working_hours"

    id = Column(String(36), primary_key=True, default=generate_id)
    business_id = Column(String(36), nullable=False)
    professional_id = Column(String(36), nullable=True)  # NULL = business default
    day_of_week = Column(String(10), nullable=False)  # SUNDAY..SATURDAY
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)
    break_start = Column(String(5), nullable=True)
    break_end = Column(String(5), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (Index("ix_working_hours_lookup", "business_id", "day_of_week", "professional_id"),)


class AppointmentModel(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=generate_id)
    business_id = Column(String(36), nullable=False, index=True)
    client_id = Column(String(36), nullable=False)
    professional_id = Column(String(36), nullable=False)
    service_id = Column(String(36), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String(16), nullable=False, default="PENDING")
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (Index("ix_appointments_professional_start", "professional_id", "start_time"),)
