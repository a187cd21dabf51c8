from typing import Any, Dict, List, Optional
from pydantic import BaseModel, validator

class ConfigEntry(BaseModel):
    key: str
    value: Any
    description: Optional[str] = None

    @validator('key')
    def validate_key(cls, v):
        if not v or not v.strip():
            raise ValueError('Config key is required')
        return v.strip().lower()

class ConfigUpdate(BaseModel):
    configs: List[ConfigEntry]

class ConfigResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]
    defaults: Dict[str, Any]
