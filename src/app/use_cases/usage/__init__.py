"""Tenant usage use cases."""

from .dtos import RecordUsageCommand, RecordUsageResponse, UsageCounter, UsageLimitsResponse
from .get_usage_limits_use_case import GetUsageLimitsUseCase
from .get_usage_summary_use_case import USAGE_SUMMARY_CACHE_KEY, GetUsageSummaryUseCase
from .record_usage_use_case import RecordUsageUseCase

__all__ = [
    "RecordUsageCommand",
    "RecordUsageResponse",
    "UsageCounter",
    "UsageLimitsResponse",
    "USAGE_SUMMARY_CACHE_KEY",
    "GetUsageLimitsUseCase",
    "GetUsageSummaryUseCase",
    "RecordUsageUseCase",
]
