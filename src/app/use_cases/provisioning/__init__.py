"""Tenant signup and provisioning use cases."""

from .dtos import (
    ProvisioningResponse,
    ProvisionTenantCommand,
    SeedPlansResponse,
    SignupTenantCommand,
    SignupTenantResponse,
)
from .provision_tenant_use_case import ProvisionTenantUseCase
from .seed_plans_use_case import SeedPlansUseCase
from .signup_tenant_use_case import SignupTenantUseCase

__all__ = [
    "ProvisioningResponse",
    "ProvisionTenantCommand",
    "SeedPlansResponse",
    "SignupTenantCommand",
    "SignupTenantResponse",
    "ProvisionTenantUseCase",
    "SeedPlansUseCase",
    "SignupTenantUseCase",
]
