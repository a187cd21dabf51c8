from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from salestrack.db.base import BaseModel
from salestrack.models.shared.enums import UserRole

class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.ADVISOR)
    team_id = Column(Integer, ForeignKey('teams.id'), nullable=True, index=True)
    parent_leader_id = Column(Integer, ForeignKey('users.id'), nullable=True, index=True)
    is_team_leader = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)

    # Relationships
    team = relationship("Team", back_populates="members")
    parent_leader = relationship("User", remote_side="User.id", back_populates="partners")
    partners = relationship("User", back_populates="parent_leader")
    daily_entries = relationship("DailyEntry", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email}>"
