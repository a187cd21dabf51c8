from sqlalchemy import Column, String, Boolean, Text
from sqlalchemy.orm import relationship
from salestrack.db.base import BaseModel

class Team(BaseModel):
    __tablename__ = 'teams'

    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text)
    is_active = Column(Boolean, default=True)

    # Relationships
    members = relationship("User", back_populates="team")

    def __repr__(self):
        return f"<Team {self.name}>"
