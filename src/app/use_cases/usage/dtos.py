from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from src.app.services.usage_metrics_tracker import ResourceUsage


class UsageCounter(str, Enum):
    employees = "employees"
    users = "users"
    departments = "departments"
    storage_bytes = "storage_bytes"
    api_requests = "api_requests"


class RecordUsageCommand(BaseModel):
    """
    Usage reported by the business application.

    Either counter or feature_key, not both.
    """

    counter: Optional[UsageCounter] = None
    feature_key: Optional[str] = Field(default=None, min_length=1, max_length=100)
    delta: int = 1

    @model_validator(mode="after")
    def exactly_one_target(self):
        if (self.counter is None) == (self.feature_key is None):
            raise ValueError("Exactly one of counter or feature_key is required")
        return self


class RecordUsageResponse(BaseModel):
    tenant_id: str
    recorded: str
    delta: int


class UsageLimitsResponse(BaseModel):
    tenant_id: str
    plan_name: Optional[str] = None
    limits: List[ResourceUsage]
