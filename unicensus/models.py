# unicensus/models.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


# -----------------------------
# Facility hierarchy
# -----------------------------
class CampusRow(Base):
    __tablename__ = "campuses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    # No FK: a dangling parent is tolerated and rendered as a root.
    parent_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class BathroomRow(Base):
    __tablename__ = "bathrooms"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    campus_id: Mapped[str] = mapped_column(String(36), ForeignKey("campuses.id"), nullable=False, index=True)
    floor: Mapped[str] = mapped_column(String(40), nullable=False)
    code: Mapped[str] = mapped_column(String(80), nullable=False)
    gender: Mapped[str] = mapped_column(String(20), nullable=False, default="AllGender")  # Male|Female|Disabled|AllGender
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


# -----------------------------
# Inspections + tickets
# -----------------------------
class InspectionRow(Base):
    __tablename__ = "inspections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    bathroom_id: Mapped[str] = mapped_column(String(36), ForeignKey("bathrooms.id"), nullable=False, index=True)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    records: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # [{item_id,status,note}]
    ticket_created: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ticket_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)


class TicketRow(Base):
    __tablename__ = "tickets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="Maintenance")  # Maintenance|WorkRequest
    inspection_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)

    # display strings kept for filtering; ids are the real references
    campus_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    bathroom_code: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    campus_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    bathroom_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="Medium")  # Low|Medium|High
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Open", index=True)  # Open|InProgress|Closed
    estimated_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    notes: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # [{id,date,text,author}]
