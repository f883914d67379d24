"""
Construction key: the categorical tuple that selects a catalog branch.

Values are the string tokens used in the reference-data asset and in request
files, so `Insulation("xlpe")` etc. parse directly from YAML/JSON.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Insulation(str, Enum):
    PVC = "pvc"
    XLPE = "xlpe"


class Armour(str, Enum):
    NON_ARMOURED = "non_armoured"
    ARMOURED = "armoured"


class Arrangement(str, Enum):
    SINGLE_CORE = "single_core"
    MULTI_CORE = "multi_core"


class InstallationMethod(str, Enum):
    A = "method_a"
    B = "method_b"
    C = "method_c"
    E = "method_e"
    F_TOUCHING = "method_f_touching"
    F_SPACED_H = "method_f_spaced_h"
    F_SPACED_V = "method_f_spaced_v"
    G_SPACED_H = "method_g_spaced_h"
    G_SPACED_V = "method_g_spaced_v"

    @property
    def is_spaced(self) -> bool:
        return self in _SPACED_METHODS

    @property
    def is_horizontal(self) -> bool:
        return self in (InstallationMethod.F_SPACED_H, InstallationMethod.G_SPACED_H)

    @property
    def letter(self) -> str:
        return self.value.split("_")[1].upper()


_SPACED_METHODS = frozenset(
    {
        InstallationMethod.F_SPACED_H,
        InstallationMethod.F_SPACED_V,
        InstallationMethod.G_SPACED_H,
        InstallationMethod.G_SPACED_V,
    }
)


class CableConfiguration(str, Enum):
    STANDARD = "standard"
    FLAT = "flat"
    TREFOIL = "trefoil"


class SystemType(str, Enum):
    AC = "ac"
    DC = "dc"


class Concern(str, Enum):
    AMPACITY = "ampacity"
    VOLTAGE_DROP = "voltage_drop"


@dataclass(frozen=True)
class ConstructionKey:
    insulation: Insulation
    armour: Armour
    arrangement: Arrangement
    phase_count: int
    method: InstallationMethod
    configuration: CableConfiguration = CableConfiguration.STANDARD
    system_type: SystemType = SystemType.AC

    @classmethod
    def from_dict(cls, data: dict) -> "ConstructionKey":
        return cls(
            insulation=Insulation(data["insulation"]),
            armour=Armour(data.get("armour", Armour.NON_ARMOURED.value)),
            arrangement=Arrangement(data["arrangement"]),
            phase_count=int(data.get("phase_count", 3)),
            method=InstallationMethod(data["method"]),
            configuration=CableConfiguration(
                data.get("configuration", CableConfiguration.STANDARD.value)
            ),
            system_type=SystemType(data.get("system_type", SystemType.AC.value)),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "insulation": self.insulation.value,
            "armour": self.armour.value,
            "arrangement": self.arrangement.value,
            "phase_count": self.phase_count,
            "method": self.method.value,
            "configuration": self.configuration.value,
            "system_type": self.system_type.value,
        }

    @property
    def loaded_conductors(self) -> int:
        # single-phase AC and DC circuits carry current in two conductors
        return 3 if self.phase_count == 3 else 2

    def describe(self) -> str:
        return (
            f"{self.armour.value.replace('_', '-')} {self.arrangement.value.replace('_', '-')} "
            f"{self.insulation.value.upper()}, Method {self.method.letter} "
            f"({self.method.value}), {self.configuration.value}, "
            f"{self.loaded_conductors} loaded conductors, {self.system_type.value.upper()}"
        )
