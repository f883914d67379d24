from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .keys import ConstructionKey
from .sizes import format_size


class ErrorCategory(str, Enum):
    # terminal: returned as SizingError
    INVALID_INPUT = "InvalidInput"
    KEY_RESOLUTION_GAP = "KeyResolutionGap"
    TABLE_NOT_FOUND = "TableNotFound"
    # non-terminal: embedded in SizingResult.issues
    AMPACITY_EXHAUSTED = "AmpacityExhausted"
    VOLTAGE_DROP_DATA_UNAVAILABLE = "VoltageDropDataUnavailable"
    VOLTAGE_DROP_EXCEEDED = "VoltageDropExceeded"

    @property
    def is_terminal(self) -> bool:
        return self in (
            ErrorCategory.INVALID_INPUT,
            ErrorCategory.KEY_RESOLUTION_GAP,
            ErrorCategory.TABLE_NOT_FOUND,
        )


class VoltageDropStatus(str, Enum):
    ACCEPTABLE = "Acceptable"
    INCREASED = "Acceptable (increased for VDrop)"
    DATA_UNAVAILABLE = "VD data unavailable"
    TOO_HIGH = "Too High"

    @property
    def is_acceptable(self) -> bool:
        return self in (VoltageDropStatus.ACCEPTABLE, VoltageDropStatus.INCREASED)


REQUIRED_REQUEST_FIELDS = ("design_current_a", "length_m", "system_voltage_v")


@dataclass(frozen=True)
class SizingRequest:
    design_current_a: float
    length_m: float
    ambient_temp_c: float
    max_vd_pct: float
    system_voltage_v: float
    circuits: int
    key: ConstructionKey

    @classmethod
    def from_dict(cls, data: dict) -> "SizingRequest":
        for name in REQUIRED_REQUEST_FIELDS:
            if data.get(name) is None:
                raise ValueError(f"request.{name} is required")
        key_data = data.get("key")
        if not isinstance(key_data, dict):
            raise ValueError("request.key must be a dict")
        return cls(
            design_current_a=float(data["design_current_a"]),
            length_m=float(data["length_m"]),
            ambient_temp_c=float(data.get("ambient_temp_c", 30.0)),
            max_vd_pct=float(data.get("max_vd_pct", 4.0)),
            system_voltage_v=float(data["system_voltage_v"]),
            circuits=int(data.get("circuits", 1)),
            key=ConstructionKey.from_dict(key_data),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "design_current_a": self.design_current_a,
            "length_m": self.length_m,
            "ambient_temp_c": self.ambient_temp_c,
            "max_vd_pct": self.max_vd_pct,
            "system_voltage_v": self.system_voltage_v,
            "circuits": self.circuits,
            "key": self.key.to_dict(),
        }


@dataclass(frozen=True)
class SizingIssue:
    category: ErrorCategory
    message: str
    size_mm2: float | None = None
    value: float | None = None  # shortfall (A) or over-limit drop (%)


@dataclass(frozen=True)
class SizingError:
    category: ErrorCategory
    message: str
    attempted_key: ConstructionKey
    attempted_paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class SizingResult:
    ampacity_size_mm2: float
    voltage_drop_size_mm2: float
    final_size_mm2: float
    temperature_factor: float
    grouping_factor: float
    drop_v: float | None
    drop_pct: float | None
    status: VoltageDropStatus

    required_current_a: float
    table_ampacity_a: float
    derated_ampacity_a: float
    vd_factor: float | None = None
    vd_factor_kind: str | None = None
    capacity_path: str = ""
    vd_path: str | None = None
    examined_sizes: tuple[float, ...] = ()
    issues: tuple[SizingIssue, ...] = field(default_factory=tuple)
    reference_version: str = ""

    @property
    def ampacity_exhausted(self) -> bool:
        return any(i.category == ErrorCategory.AMPACITY_EXHAUSTED for i in self.issues)

    @property
    def status_message(self) -> str:
        if self.status == VoltageDropStatus.DATA_UNAVAILABLE:
            issue = self._issue(ErrorCategory.VOLTAGE_DROP_DATA_UNAVAILABLE)
            if issue is not None:
                return issue.message
            return f"VD data unavailable for size {format_size(self.voltage_drop_size_mm2)}"
        if self.status == VoltageDropStatus.TOO_HIGH:
            issue = self._issue(ErrorCategory.VOLTAGE_DROP_EXCEEDED)
            return f"Too High ({issue.message})" if issue is not None else "Too High"
        if self.status == VoltageDropStatus.INCREASED:
            return f"Acceptable (increased to {format_size(self.voltage_drop_size_mm2)} for VDrop)"
        return self.status.value

    def _issue(self, category: ErrorCategory) -> SizingIssue | None:
        for issue in self.issues:
            if issue.category == category:
                return issue
        return None
