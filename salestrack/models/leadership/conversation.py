from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from salestrack.db.base import BaseModel

class LeadershipConversation(BaseModel):
    __tablename__ = 'leadership_conversations'

    partner_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    leader_id = Column(Integer, ForeignKey('users.id'), nullable=False)
    notes = Column(Text)
    action_items = Column(JSON, default=list)
    next_steps = Column(JSON, default=list)
    conversation_date = Column(DateTime(timezone=True), server_default=func.now())
