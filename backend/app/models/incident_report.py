"""Model recording service incidents that happened during a work order."""

from __future__ import annotations

import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, generate_uuid
from .work_order import _enum_column_type


class IncidentType(str, enum.Enum):
    CAMERA = "camera"
    INTERNET = "internet"
    PLATFORM = "platform"
    AUDIO = "audio"
    OTHER = "other"


class RootCause(str, enum.Enum):
    PARISH_EQUIPMENT = "parish_equipment"
    ISP_NETWORK = "isp_network"
    PLATFORM_PROVIDER = "platform_provider"
    CONTRACTOR_ERROR = "contractor_error"
    UNKNOWN = "unknown"


class IncidentOutcome(str, enum.Enum):
    LIVESTREAM_PARTIAL = "livestream_partial"
    LIVESTREAM_UNAVAILABLE_RECORDING_DELIVERED = "livestream_unavailable_recording_delivered"
    NEITHER_AVAILABLE = "neither_available"


class IncidentReport(Base):
    """What went wrong at an event, how it was mitigated and whether the client knows."""

    __tablename__ = "incident_reports"

    id = Column("incident_report_id", GUID(), primary_key=True, default=generate_uuid)
    work_order_id = Column(
        GUID(),
        ForeignKey("work_orders.work_order_id", ondelete="CASCADE"),
        nullable=False,
    )
    incident_type = Column(
        _enum_column_type(IncidentType, "incident_type_enum"), nullable=False
    )
    incident_type_other = Column(String(255), nullable=True)
    root_cause = Column(_enum_column_type(RootCause, "incident_root_cause_enum"), nullable=False)
    mitigation = Column(Text, nullable=False)
    outcome = Column(_enum_column_type(IncidentOutcome, "incident_outcome_enum"), nullable=False)
    notes = Column(Text, nullable=True)

    client_notified = Column(Boolean, nullable=False, default=False)
    client_notified_at = Column(DateTime(timezone=True), nullable=True)

    reported_by_id = Column(GUID(), ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    work_order = relationship("WorkOrder", back_populates="incident_reports")
    reported_by = relationship("User")

    @property
    def work_order_event_name(self) -> str:
        return self.work_order.event_name

    @property
    def work_order_event_date(self):
        return self.work_order.event_date


Index("incident_reports_work_order_idx", IncidentReport.work_order_id)
