from sqlalchemy import Column, Integer, Text, JSON, UniqueConstraint
from salestrack.db.base import BaseModel

class WeekdayQuestion(BaseModel):
    __tablename__ = 'weekday_questions'

    weekday = Column(Integer, nullable=False)  # ISO weekday, 1 = Monday
    yesterday_question = Column(Text, nullable=False)
    today_questions = Column(JSON, nullable=False)  # list of prompts, answered by index
    trainee_question = Column(Text)

    __table_args__ = (
        UniqueConstraint('weekday', name='uq_weekday_questions_weekday'),
    )
