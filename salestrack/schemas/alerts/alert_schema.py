from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

class AlertResponse(BaseModel):
    id: int
    alert_type: str
    severity: str
    title: str
    message: str
    entity_type: Optional[str] = None
    entity_id: Optional[int] = None
    metric: Optional[str] = None
    cycle_label: Optional[str] = None
    is_read: bool = False
    is_resolved: bool = False
    assigned_to: Optional[int] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class AlertResolve(BaseModel):
    resolution_notes: Optional[str] = None

class AlertScanResult(BaseModel):
    scanned_users: int
    created: int
