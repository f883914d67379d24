"""
cable_core: conductor sizing core.

- derating factors (ambient temperature, grouping)
- construction key resolution per concern (ampacity / voltage drop)
- capacity and voltage-drop table access over an injected reference catalog
- ampacity scan, voltage-drop escalation, reconciliation

No UI, storage or transport here: the core takes a SizingRequest and returns
a SizingResult or a SizingError.
"""

from .engine import CableSizingEngine, size_cable
from .keys import (
    Armour,
    Arrangement,
    CableConfiguration,
    Concern,
    ConstructionKey,
    InstallationMethod,
    Insulation,
    SystemType,
)
from .models import (
    ErrorCategory,
    SizingError,
    SizingIssue,
    SizingRequest,
    SizingResult,
    VoltageDropStatus,
)
from .reference_data import ReferenceData, default_reference_data, load_reference_data

__all__ = [
    "Armour",
    "Arrangement",
    "CableConfiguration",
    "CableSizingEngine",
    "Concern",
    "ConstructionKey",
    "ErrorCategory",
    "InstallationMethod",
    "Insulation",
    "ReferenceData",
    "SizingError",
    "SizingIssue",
    "SizingRequest",
    "SizingResult",
    "SystemType",
    "VoltageDropStatus",
    "default_reference_data",
    "load_reference_data",
    "size_cable",
]
