"""
Typed metadata maps stored on lifecycle events, alerts and provisioning results.

Values are restricted to JSON scalars; richer values are normalized on write.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union
from uuid import UUID

MetadataValue = Union[str, int, float, bool, None]
Metadata = Dict[str, MetadataValue]


def normalize_value(value: Any) -> MetadataValue:
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    raise TypeError(f"Unsupported metadata value type: {type(value).__name__}")


def normalize_metadata(values: Optional[Mapping[str, Any]]) -> Metadata:
    if not values:
        return {}
    return {str(key): normalize_value(value) for key, value in values.items()}
