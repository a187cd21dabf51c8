from pydantic import BaseModel, ConfigDict, validator
from typing import List, Optional
from datetime import datetime

class WeekdayQuestionBase(BaseModel):
    yesterday_question: str
    today_questions: List[str] = []
    trainee_question: Optional[str] = None

class WeekdayQuestionSave(WeekdayQuestionBase):
    @validator('yesterday_question')
    def validate_yesterday_question(cls, v):
        if not v or not v.strip():
            raise ValueError('The question about yesterday is required')
        return v.strip()

    @validator('today_questions')
    def drop_empty_questions(cls, v):
        questions = [question.strip() for question in v if question and question.strip()]
        if not questions:
            raise ValueError('At least one question for today is required')
        return questions

class WeekdayQuestionResponse(WeekdayQuestionBase):
    id: int
    weekday: int
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class DailyQuestions(BaseModel):
    """Prompts shown on the daily entry form for one weekday."""
    weekday: int
    yesterday_question: str
    today_questions: List[str]
    is_default: bool
