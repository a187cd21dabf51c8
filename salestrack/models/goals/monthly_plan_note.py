from sqlalchemy import Column, Integer, String, Text, Date, ForeignKey, UniqueConstraint
from salestrack.db.base import BaseModel

class MonthlyPlanNote(BaseModel):
    __tablename__ = 'monthly_plan_notes'

    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    planning_month = Column(Date, nullable=False)  # first day of month
    previous_month_missed_reason = Column(Text)
    target_increase_reason = Column(Text)
    focus_area = Column(String(100))

    __table_args__ = (
        UniqueConstraint('user_id', 'planning_month', name='uq_monthly_note_user_month'),
    )
