from sqlalchemy import Column, Integer, String, Float, Text, Date, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from salestrack.db.base import BaseModel

class DailyEntry(BaseModel):
    __tablename__ = 'daily_entries'

    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    entry_date = Column(Date, nullable=False, index=True)

    # Activity counters, one column per MetricKey
    fa = Column(Integer, default=0)
    eh = Column(Float, default=0)
    new_appointments = Column(Integer, default=0)
    recommendations = Column(Integer, default=0)
    tiv_invitations = Column(Integer, default=0)
    taa_invitations = Column(Integer, default=0)
    tgs_registrations = Column(Integer, default=0)
    bav_checks = Column(Integer, default=0)

    # Free text, ignored by the progress engine
    highlight_yesterday = Column(Text)
    help_needed = Column(Text)
    improvement_today = Column(Text)
    focus_area = Column(String(100))
    weekday_answers = Column(JSON, default=dict)  # index of the day's question -> answer

    __table_args__ = (
        UniqueConstraint('user_id', 'entry_date', name='uq_daily_entries_user_date'),
    )

    # Relationships
    user = relationship("User", back_populates="daily_entries")
