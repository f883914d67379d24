from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .key_resolver import ResolvedKey
from .keys import Concern
from .reference_data import ReferenceData
from .sizes import parse_size, sorted_sizes

logger = logging.getLogger(__name__)


class FactorKind(str, Enum):
    IMPEDANCE = "impedance"
    RESISTIVE = "resistive"


@dataclass(frozen=True)
class VdFactor:
    value: float  # mV/A/m
    kind: FactorKind


@dataclass(frozen=True)
class TableNotFound:
    concern: Concern
    attempted: tuple[str, ...]

    @property
    def message(self) -> str:
        what = "Current-carrying capacity" if self.concern == Concern.AMPACITY else "Voltage-drop"
        return f"{what} data not available for the selected configuration (tried: {', '.join(self.attempted)})"


def _find(table: Mapping[float, object], size: float):
    for key, value in table.items():
        if math.isclose(key, size):
            return value
    return None


@dataclass(frozen=True)
class CapacityTable:
    path: str
    ampacity: Mapping[float, float]
    fallback_used: bool = False

    def sizes(self) -> list[float]:
        return sorted_sizes(self.ampacity.keys())

    def at(self, size: float) -> float | None:
        return _find(self.ampacity, size)

    @property
    def largest(self) -> float:
        return self.sizes()[-1]


@dataclass(frozen=True)
class VoltageDropTable:
    path: str
    factors: Mapping[float, VdFactor]
    fallback_used: bool = False

    def factor(self, size: float) -> VdFactor | None:
        return _find(self.factors, size)


def _positive(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number) or number <= 0.0:
        return None
    return number


def _parse_capacity(node: Mapping) -> dict[float, float] | None:
    if not node:
        return None
    table: dict[float, float] = {}
    for key, value in node.items():
        amps = _positive(value)
        if amps is None:
            # intermediate node, not a size → ampacity table
            return None
        table[parse_size(key)] = amps
    return table


def vd_factor_from_entry(entry: object) -> VdFactor | None:
    """Prefer the impedance (z) column when present, else the resistive (r) one."""
    if not isinstance(entry, Mapping):
        return None
    z = _positive(entry.get("z"))
    if z is not None:
        return VdFactor(value=z, kind=FactorKind.IMPEDANCE)
    r = _positive(entry.get("r"))
    if r is not None:
        return VdFactor(value=r, kind=FactorKind.RESISTIVE)
    return None


def _parse_vd(node: Mapping) -> dict[float, VdFactor] | None:
    if not node:
        return None
    table: dict[float, VdFactor] = {}
    for key, entry in node.items():
        if not isinstance(entry, Mapping) or not any(k in entry for k in ("r", "x", "z")):
            return None
        factor = vd_factor_from_entry(entry)
        if factor is not None:
            table[parse_size(key)] = factor
    return table or None


def get_capacity_table(reference: ReferenceData, resolved: ResolvedKey) -> CapacityTable | TableNotFound:
    if resolved.concern != Concern.AMPACITY:
        raise ValueError("get_capacity_table requires a key resolved for the ampacity concern")
    for idx, fragment in enumerate(resolved.paths):
        node = reference.node(resolved.branch, resolved.section, fragment)
        table = _parse_capacity(node) if node is not None else None
        if table is None:
            logger.debug("Capacity miss: %s", resolved.dotted(fragment))
            continue
        if idx:
            logger.debug("Capacity fallback hit: %s", resolved.dotted(fragment))
        return CapacityTable(
            path=resolved.dotted(fragment),
            ampacity=MappingProxyType(table),
            fallback_used=idx > 0,
        )
    return TableNotFound(concern=resolved.concern, attempted=resolved.attempted)


def get_vd_table(reference: ReferenceData, resolved: ResolvedKey) -> VoltageDropTable | TableNotFound:
    if resolved.concern != Concern.VOLTAGE_DROP:
        raise ValueError("get_vd_table requires a key resolved for the voltage-drop concern")
    for idx, fragment in enumerate(resolved.paths):
        node = reference.node(resolved.branch, resolved.section, fragment)
        table = _parse_vd(node) if node is not None else None
        if table is None:
            logger.debug("VD miss: %s", resolved.dotted(fragment))
            continue
        if idx:
            logger.debug("VD fallback hit: %s", resolved.dotted(fragment))
        return VoltageDropTable(
            path=resolved.dotted(fragment),
            factors=MappingProxyType(table),
            fallback_used=idx > 0,
        )
    return TableNotFound(concern=resolved.concern, attempted=resolved.attempted)
