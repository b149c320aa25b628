"""
SQLAlchemy models for the database.
Maps domain entities to database tables.
"""

from sqlalchemy import (
    Column, String, DateTime, Text, Boolean, Integer,
    Numeric, JSON, Index, CheckConstraint, text
)
from sqlalchemy.sql import func

from app.infrastructure.db.database import Base


class TaskModel(Base):
    """Task lookup table; only the fields time tracking needs."""
    __tablename__ = 'tasks'

    id = Column(String(36), primary_key=True)
    project_id = Column(String(36), nullable=False, index=True)
    task_type_id = Column(String(36))
    title = Column(String(255))

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class TimeEntryModel(Base):
    """Time entry table"""
    __tablename__ = 'time_entries'

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False)
    project_id = Column(String(36), nullable=False)
    task_id = Column(String(36), nullable=False)

    description = Column(Text)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True))
    duration = Column(Integer, nullable=False, default=0)

    # Billing
    billable = Column(Boolean, nullable=False, default=True)
    billable_rate = Column(Numeric(10, 2))

    # Invoicing
    invoice_id = Column(String(36))

    # Metadata
    tags = Column(JSON, nullable=False, default=list)
    source = Column(String(20), nullable=False, default="timer")

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Constraints and indexes
    __table_args__ = (
        Index('idx_time_entries_user_start', 'user_id', 'start_time'),
        Index('idx_time_entries_project', 'project_id'),
        Index('idx_time_entries_task', 'task_id'),
        Index('idx_time_entries_invoice', 'invoice_id'),
        CheckConstraint('duration >= 0', name='time_entry_duration_non_negative'),
        # Only one running timer per user
        Index(
            'uq_time_entries_running_timer', 'user_id',
            unique=True,
            postgresql_where=text('end_time IS NULL'),
            sqlite_where=text('end_time IS NULL'),
        ),
    )


class BillableRateModel(Base):
    """Billable rate table"""
    __tablename__ = 'billable_rates'

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36))
    project_id = Column(String(36))
    task_type_id = Column(String(36))

    hourly_rate = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    effective_from = Column(DateTime(timezone=True), nullable=False)
    effective_to = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_billable_rates_scope', 'user_id', 'project_id', 'task_type_id'),
        CheckConstraint('hourly_rate >= 0', name='billable_rate_non_negative'),
    )


class TimeTrackingSettingsModel(Base):
    """Per-user time tracking settings"""
    __tablename__ = 'time_tracking_settings'

    user_id = Column(String(36), primary_key=True)
    default_billable_rate = Column(Numeric(10, 2), nullable=False, default=0)
    rounding_interval = Column(Integer, nullable=False, default=15)
    auto_stop_timer_after_inactivity = Column(Integer, nullable=False, default=30)
    reminder_interval = Column(Integer, nullable=False, default=0)
    working_hours = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
