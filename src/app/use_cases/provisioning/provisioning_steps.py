"""
Tenant provisioning steps.

Each step is idempotent on its own (it looks for what it would create
before creating it) and returns a flat dict of scalar results that is
merged into Tenant.provisioning_result when the step is checkpointed.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import bcrypt

from src.app.services.email_service import IEmailService
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.usage_metrics_tracker import UsageMetricsTracker
from src.domain.clock import Clock
from src.domain.context import TenantContext
from src.domain.entities import (
    Department,
    Module,
    Position,
    RolePermission,
    Subscription,
    SubscriptionStatus,
    Tenant,
    TenantUser,
)

from .dtos import ProvisionTenantCommand

logger = logging.getLogger(__name__)

ADMIN_ROLE = "Admin"
ROLES = ("SuperAdmin", "Admin", "HR", "Employee")

# (path, name, display order)
DEFAULT_MODULES: Tuple[Tuple[str, str, int], ...] = (
    ("/dashboard", "Dashboard", 1),
    ("/employees", "Employees", 2),
    ("/organization", "Organization", 3),
    ("/departments", "Departments", 4),
    ("/positions", "Positions", 5),
)

PERMISSION_PAGES = (
    "/dashboard",
    "/employees",
    "/organization",
    "/departments",
    "/positions",
    "/calendar",
    "/notice-board",
    "/expenses",
    "/payroll",
    "/payroll/reports",
    "/payroll/settings",
    "/settings",
    "/role-permissions",
)

HR_VIEW_PAGES = {
    "/dashboard",
    "/employees",
    "/calendar",
    "/notice-board",
    "/settings",
    "/payroll",
    "/payroll/reports",
    "/payroll/settings",
}
HR_EDIT_PAGES = {"/employees", "/calendar", "/notice-board", "/payroll/reports", "/payroll/settings"}
EMPLOYEE_VIEW_PAGES = {"/dashboard", "/calendar", "/notice-board", "/settings"}

DEFAULT_DEPARTMENTS = (
    "People/HR",
    "Engineering",
    "Sales",
    "Finance",
    "Customer Support",
    "Operations",
)

# (title, department name or None for company-wide)
DEFAULT_POSITIONS: Tuple[Tuple[str, Optional[str]], ...] = (
    ("Employee", None),
    ("Manager", None),
    ("HR Admin", "People/HR"),
    ("HR Manager", "People/HR"),
    ("Finance Admin", "Finance"),
    ("Finance Manager", "Finance"),
    ("Support Agent", "Customer Support"),
    ("Support Manager", "Customer Support"),
    ("Sales Representative", "Sales"),
    ("Sales Manager", "Sales"),
    ("Operations Manager", "Operations"),
    ("Junior Engineer", "Engineering"),
    ("Senior Engineer", "Engineering"),
    ("Lead Engineer", "Engineering"),
    ("Engineering Manager", "Engineering"),
)

SETUP_TOKEN_TTL = timedelta(days=7)


def permission_flags(role: str, page: str) -> Tuple[bool, bool, bool, bool]:
    """(view, create, edit, delete) for role on page"""
    if role in ("SuperAdmin", "Admin"):
        return True, True, True, True
    if role == "HR":
        if page not in HR_VIEW_PAGES:
            return False, False, False, False
        edit = page in HR_EDIT_PAGES
        return True, edit, edit, False
    if role == "Employee" and page in EMPLOYEE_VIEW_PAGES:
        return True, False, False, False
    return False, False, False, False


class ProvisioningStepError(Exception):
    """Expected failure of a provisioning step"""


@dataclass
class StepContext:
    uow: UnitOfWork
    tenant: Tenant
    command: ProvisionTenantCommand
    email_service: IEmailService
    default_plan_name: str
    clock: Clock

    @property
    def scope(self) -> TenantContext:
        return TenantContext.elevated_for(self.tenant.id, source="provisioning")

    @property
    def admin_email(self) -> str:
        return self.tenant.admin_email.strip().lower()


StepResult = Dict[str, object]


async def seed_role_permissions(ctx: StepContext) -> StepResult:
    data = ctx.uow.tenant_data
    created = 0
    for role in ROLES:
        for page in PERMISSION_PAGES:
            existing = await data.find_one(
                ctx.scope,
                RolePermission,
                RolePermission.role_name == role,
                RolePermission.page_path == page,
            )
            if existing:
                continue
            view, create, edit, delete = permission_flags(role, page)
            await data.add(
                ctx.scope,
                RolePermission(
                    tenant_id=ctx.tenant.id,
                    role_name=role,
                    page_path=page,
                    can_view=view,
                    can_create=create,
                    can_edit=edit,
                    can_delete=delete,
                ),
            )
            created += 1
    return {"role_permissions_created": created}


async def create_modules(ctx: StepContext) -> StepResult:
    data = ctx.uow.tenant_data
    created = 0
    for path, name, order in DEFAULT_MODULES:
        if await data.find_one(ctx.scope, Module, Module.path == path):
            continue
        await data.add(
            ctx.scope,
            Module(tenant_id=ctx.tenant.id, name=name, path=path, display_order=order),
        )
        created += 1
    return {"modules_created": created}


async def create_departments_and_positions(ctx: StepContext) -> StepResult:
    data = ctx.uow.tenant_data
    departments: Dict[str, Department] = {}
    departments_created = 0
    for name in DEFAULT_DEPARTMENTS:
        department = await data.find_one(ctx.scope, Department, Department.name == name)
        if department is None:
            department = await data.add(
                ctx.scope,
                Department(
                    tenant_id=ctx.tenant.id, name=name, description=f"{name} department"
                ),
            )
            departments_created += 1
        departments[name] = department

    positions_created = 0
    for title, department_name in DEFAULT_POSITIONS:
        if await data.find_one(ctx.scope, Position, Position.title == title):
            continue
        department = departments.get(department_name) if department_name else None
        await data.add(
            ctx.scope,
            Position(
                tenant_id=ctx.tenant.id,
                title=title,
                department_id=department.id if department else None,
            ),
        )
        positions_created += 1

    if departments_created:
        tracker = UsageMetricsTracker(ctx.uow, ctx.default_plan_name, ctx.clock)
        await tracker.increment_department_count(ctx.tenant.id, departments_created)

    return {
        "departments_created": departments_created,
        "positions_created": positions_created,
    }


async def attach_subscription(ctx: StepContext) -> StepResult:
    existing = await ctx.uow.subscriptions.get_active_by_tenant(ctx.tenant.id)
    if existing:
        plan = await ctx.uow.plans.get_by_id(existing.plan_id)
        return {"plan": plan.name if plan else None, "subscription_id": str(existing.id)}

    plan_id = ctx.command.plan_id or ctx.tenant.requested_plan_id
    if plan_id:
        plan = await ctx.uow.plans.get_by_id(plan_id)
    else:
        plan = await ctx.uow.plans.get_by_name(ctx.default_plan_name)
    if plan is None or not plan.is_active:
        raise ProvisioningStepError(f"Plan {plan_id or ctx.default_plan_name} not found")

    start_trial = ctx.command.start_trial
    if start_trial is None:
        start_trial = ctx.tenant.start_trial
    trialing = bool(start_trial and plan.trial_days)
    now = ctx.clock()

    subscription = await ctx.uow.subscriptions.create(
        Subscription(
            tenant_id=ctx.tenant.id,
            plan_id=plan.id,
            status=SubscriptionStatus.trialing if trialing else SubscriptionStatus.active,
            is_trial=trialing,
            trial_ends_at=now + timedelta(days=plan.trial_days) if trialing else None,
        )
    )
    return {"plan": plan.name, "subscription_id": str(subscription.id), "trial": trialing}


async def create_admin_user(ctx: StepContext) -> StepResult:
    data = ctx.uow.tenant_data
    user = await data.find_one(ctx.scope, TenantUser, TenantUser.email == ctx.admin_email)
    if user is not None:
        # Link the existing account instead of creating a second one
        if user.role_name != ADMIN_ROLE or not user.is_active:
            user.role_name = ADMIN_ROLE
            user.is_active = True
            await data.add(ctx.scope, user)
        return {"admin_user_id": str(user.id), "admin_user_linked": True}

    user = await data.add(
        ctx.scope,
        TenantUser(
            tenant_id=ctx.tenant.id,
            email=ctx.admin_email,
            first_name=ctx.tenant.admin_first_name,
            last_name=ctx.tenant.admin_last_name,
            role_name=ADMIN_ROLE,
        ),
    )
    tracker = UsageMetricsTracker(ctx.uow, ctx.default_plan_name, ctx.clock)
    await tracker.increment_user_count(ctx.tenant.id)
    return {"admin_user_id": str(user.id), "admin_user_linked": False}


async def send_invite_email(ctx: StepContext) -> StepResult:
    data = ctx.uow.tenant_data
    user = await data.find_one(ctx.scope, TenantUser, TenantUser.email == ctx.admin_email)
    if user is None:
        raise ProvisioningStepError("Admin user missing, cannot send invite")

    # A fresh token on every attempt; only its hash is stored
    setup_token = secrets.token_urlsafe(32)
    user.setup_token_hash = bcrypt.hashpw(setup_token.encode("utf-8"), bcrypt.gensalt(12)).decode(
        "utf-8"
    )
    user.setup_token_expires_at = ctx.clock() + SETUP_TOKEN_TTL
    await data.add(ctx.scope, user)

    await ctx.email_service.send_admin_invite(
        user.email, user.first_name, ctx.tenant.name, setup_token
    )
    return {"invite_sent_to": user.email}


@dataclass(frozen=True)
class ProvisioningStep:
    name: str
    run: Callable[[StepContext], Awaitable[StepResult]]


PROVISIONING_STEPS: List[ProvisioningStep] = [
    ProvisioningStep("seed_role_permissions", seed_role_permissions),
    ProvisioningStep("create_modules", create_modules),
    ProvisioningStep("create_departments_and_positions", create_departments_and_positions),
    ProvisioningStep("attach_subscription", attach_subscription),
    ProvisioningStep("create_admin_user", create_admin_user),
    ProvisioningStep("send_invite_email", send_invite_email),
]
