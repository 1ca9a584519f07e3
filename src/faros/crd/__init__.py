"""CRD types for the faros operator."""

from .registry import CRDRegistry
from .base import (
    CRDSpec,
    CRDStatus,
    CRDCondition,
    CRDMetadata,
    GroupKind,
    GroupVersionKind,
)

__all__ = [
    "CRDRegistry",
    "CRDSpec",
    "CRDStatus",
    "CRDCondition",
    "CRDMetadata",
    "GroupKind",
    "GroupVersionKind",
]
