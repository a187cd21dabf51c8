from typing import List
from pydantic import BaseModel

class IntegrityIssue(BaseModel):
    type: str          # missing_goals, missing_entries, broken_quotas, inconsistent_data, missing_leader
    severity: str      # high, medium, low
    description: str
    affected_users: List[str]
    suggested_action: str
