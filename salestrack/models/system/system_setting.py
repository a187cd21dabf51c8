from sqlalchemy import Column, String, Boolean, Text
from salestrack.db.base import BaseModel

class SystemSetting(BaseModel):
    __tablename__ = 'system_settings'

    category = Column(String(50), nullable=False, default="THRESHOLDS")  # THRESHOLDS, FEATURES
    setting_key = Column(String(100), nullable=False, unique=True)
    setting_value = Column(Text)
    data_type = Column(String(20), default="FLOAT")  # FLOAT, INTEGER, BOOLEAN, JSON
    description = Column(Text)
    is_active = Column(Boolean, default=True)
