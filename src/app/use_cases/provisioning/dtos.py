"""
Provisioning Use Case DTOs (Data Transfer Objects)

Command/Response pattern:
- SignupTenantCommand: register a new tenant
- ProvisionTenantCommand: run (or resume) tenant provisioning
"""

from typing import Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class SignupTenantCommand(BaseModel):
    """Validated intent to register a tenant"""

    name: str = Field(..., min_length=2, max_length=255)
    domain: Optional[str] = Field(default=None, max_length=255)
    admin_email: EmailStr
    admin_first_name: str = Field(default="", max_length=100)
    admin_last_name: str = Field(default="", max_length=100)
    plan_id: Optional[UUID] = None
    start_trial: bool = False
    idempotency_token: Optional[str] = Field(default=None, min_length=8, max_length=128)


class SignupTenantResponse(BaseModel):
    tenant_id: str
    name: str
    status: str
    replayed: bool = False


class ProvisionTenantCommand(BaseModel):
    plan_id: Optional[UUID] = None
    start_trial: Optional[bool] = None
    idempotency_token: Optional[str] = None
    triggered_by: Optional[str] = None


class ProvisioningResponse(BaseModel):
    tenant_id: str
    status: str
    steps_completed: List[str]
    replayed: bool = False
    result: Dict[str, Union[str, int, float, bool, None]] = Field(default_factory=dict)


class SeedPlansResponse(BaseModel):
    created: List[str]
    existing: List[str]
