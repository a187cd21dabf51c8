from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text
from salestrack.db.base import BaseModel

class Alert(BaseModel):
    __tablename__ = 'alerts'

    alert_type = Column(String(50), nullable=False)  # GOAL_DEVIATION, OFF_TRACK
    severity = Column(String(20), default="MEDIUM")  # MEDIUM, HIGH
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    entity_type = Column(String(50))  # USER
    entity_id = Column(Integer)
    metric = Column(String(50))
    cycle_label = Column(String(50))  # planning cycle the alert was raised for
    is_read = Column(Boolean, default=False)
    is_resolved = Column(Boolean, default=False)
    assigned_to = Column(Integer)  # Leader user ID
    resolved_by = Column(Integer)  # User ID
    resolved_at = Column(DateTime(timezone=True))
    resolution_notes = Column(Text)
