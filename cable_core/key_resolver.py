"""
Construction key → catalog paths.

Capacity and voltage-drop tables are organised along different axes, so each
concern has its own resolver:

- capacity: one table per installation method, split by loaded conductors
  (and by configuration/direction for single-core free-air methods);
- voltage drop: methods are grouped (A+B, C+F touching, F+G spaced) and the
  table is split by phase arrangement instead.

A resolved key is an ordered tuple of candidate fragment paths (primary
first); the accessors in `tables` try them first-match-wins.
"""

from __future__ import annotations

from dataclasses import dataclass

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
from .reference_data import SECTION_CAPACITY, SECTION_VOLTAGE_DROP

M = InstallationMethod

Path = tuple[str, ...]


@dataclass(frozen=True)
class ResolvedKey:
    key: ConstructionKey
    concern: Concern
    branch: tuple[str, str, str]
    section: str
    paths: tuple[Path, ...]

    @property
    def primary_path(self) -> Path:
        return self.paths[0]

    def dotted(self, fragment: Path) -> str:
        return ".".join(("copper", *self.branch, self.section, *fragment))

    @property
    def attempted(self) -> tuple[str, ...]:
        return tuple(self.dotted(p) for p in self.paths)


@dataclass(frozen=True)
class KeyResolutionGap:
    key: ConstructionKey
    concern: Concern
    reason: str


def _branch(key: ConstructionKey) -> tuple[str, str, str]:
    return (key.insulation.value, key.armour.value, key.arrangement.value)


def available_methods(
    insulation: Insulation, armour: Armour, arrangement: Arrangement
) -> list[InstallationMethod]:
    """Installation methods tabulated for a cable construction, in display order."""
    single = arrangement == Arrangement.SINGLE_CORE
    armoured = armour == Armour.ARMOURED

    methods = [M.C]
    if not armoured:
        methods += [M.B, M.A]
    if not single:
        methods.append(M.E)
    if single:
        methods += [M.F_TOUCHING, M.F_SPACED_H, M.F_SPACED_V]
        if insulation == Insulation.XLPE and not armoured:
            methods += [M.G_SPACED_H, M.G_SPACED_V]
    return methods


def available_configurations(
    arrangement: Arrangement, method: InstallationMethod, phase_count: int
) -> list[CableConfiguration]:
    if arrangement == Arrangement.MULTI_CORE:
        return [CableConfiguration.STANDARD]
    if phase_count != 3:
        return [CableConfiguration.FLAT]
    if method in (M.C, M.F_TOUCHING) or method.is_spaced:
        return [CableConfiguration.FLAT, CableConfiguration.TREFOIL]
    return [CableConfiguration.STANDARD]


def normalized_configuration(key: ConstructionKey) -> CableConfiguration:
    """The configuration actually used for lookup; unsupported ones fall back to the first offered."""
    offered = available_configurations(key.arrangement, key.method, key.phase_count)
    if key.configuration in offered:
        return key.configuration
    return offered[0]


def check_supported(key: ConstructionKey) -> str | None:
    """Reason the combination is architecturally unsupported, or None."""
    if key.phase_count not in (1, 3):
        return f"phase_count must be 1 or 3, got {key.phase_count}"
    if key.system_type == SystemType.DC and key.phase_count != 1:
        return "DC circuits are tabulated for two loaded conductors only (phase_count=1)"

    armoured = key.armour == Armour.ARMOURED
    single = key.arrangement == Arrangement.SINGLE_CORE
    method = key.method

    if method in (M.A, M.B) and armoured:
        return (
            f"Method {method.letter} (conduit/trunking) is not tabulated for armoured cables; "
            "use Method C or a free-air method"
        )
    if method == M.E and single:
        return "Method E (perforated tray / free air) is tabulated for multi-core cables only"
    if method not in (M.A, M.B, M.C, M.E) and not single:
        return f"Method {method.letter} ({method.value}) is tabulated for single-core cables only"
    if method in (M.G_SPACED_H, M.G_SPACED_V):
        if armoured:
            return (
                "Armoured single-core cables are not tabulated for Method G "
                "(spaced in free air); use Method F spaced instead"
            )
        if key.insulation != Insulation.XLPE:
            return "Method G (spaced in free air) is tabulated for XLPE single-core cables only"
    return None


def explain_missing_capacity(key: ConstructionKey) -> str | None:
    """
    Specific diagnostic for the known sparse area of the catalog (armoured
    single-core cables in free-air methods). None means the miss is generic.
    """
    if key.armour != Armour.ARMOURED or key.arrangement != Arrangement.SINGLE_CORE:
        return None
    if key.method in (M.A, M.B, M.C, M.E):
        return None
    letter = key.method.letter
    if key.insulation == Insulation.PVC:
        return (
            f"Tables for armoured single-core PVC cables with Method {letter} are limited; "
            "consider XLPE insulation or a different installation method"
        )
    config = normalized_configuration(key).value
    return (
        f"Armoured single-core XLPE cables in {config} configuration with "
        f"{key.loaded_conductors} loaded conductors ({key.system_type.value.upper()}) "
        f"are not tabulated for {key.method.value}; try an alternative configuration "
        "or installation method"
    )


def _conductors_key(key: ConstructionKey) -> str:
    if key.loaded_conductors == 2:
        return "2"
    return "3_4" if key.arrangement == Arrangement.MULTI_CORE else "3"


def _other_three_phase_spelling(ck: str) -> str | None:
    if ck == "3_4":
        return "3"
    if ck == "3":
        return "3_4"
    return None


def _dedupe(paths: list[Path]) -> tuple[Path, ...]:
    seen: list[Path] = []
    for p in paths:
        if p not in seen:
            seen.append(p)
    return tuple(seen)


def _capacity_paths(key: ConstructionKey) -> tuple[Path, ...]:
    method = key.method
    ck = _conductors_key(key)
    alt = _other_three_phase_spelling(ck)
    config = normalized_configuration(key)
    three = key.loaded_conductors == 3
    single = key.arrangement == Arrangement.SINGLE_CORE

    paths: list[Path] = []
    if method in (M.A, M.B, M.E) or (method == M.C and not single):
        paths.append((method.value, ck))
        if alt:
            paths.append((method.value, alt))
    elif method == M.C:
        if three:
            paths += [(method.value, f"3_{config.value}"), (method.value, "3")]
        else:
            paths.append((method.value, "2"))
    elif method == M.F_TOUCHING:
        if three:
            paths += [("method_f", "touching", f"3_{config.value}"), ("method_f", "touching", "3")]
        else:
            paths.append(("method_f", "touching", "2"))
    elif method in (M.F_SPACED_H, M.F_SPACED_V):
        direction = "horizontal" if method.is_horizontal else "vertical"
        if key.armour == Armour.ARMOURED and key.system_type == SystemType.DC:
            # armoured single-core: DC rating is tabulated apart from AC (no armour losses)
            paths += [("method_f", "spaced", direction, "dc"), ("method_f", "spaced", direction, "2")]
        else:
            paths.append(("method_f", "spaced", direction, ck))
    elif method in (M.G_SPACED_H, M.G_SPACED_V):
        direction = "horizontal" if method.is_horizontal else "vertical"
        paths.append(("method_g", direction, ck))
    else:  # pragma: no cover - enum is closed
        raise ValueError(f"Unsupported installation method: {method}")
    return _dedupe(paths)


# VD tables group methods differently from capacity tables.
_VD_METHOD_GROUPS: dict[InstallationMethod, str] = {
    M.A: "enclosed",
    M.B: "enclosed",
    M.C: "touching",
    M.F_TOUCHING: "touching",
    M.E: "free_air",
    M.F_SPACED_H: "spaced",
    M.F_SPACED_V: "spaced",
    M.G_SPACED_H: "spaced",
    M.G_SPACED_V: "spaced",
}


def _voltage_drop_paths(key: ConstructionKey) -> tuple[Path, ...]:
    if key.system_type == SystemType.DC:
        return (("dc",),)

    group = _VD_METHOD_GROUPS[key.method]
    single = key.arrangement == Arrangement.SINGLE_CORE
    three = key.loaded_conductors == 3
    config = normalized_configuration(key)
    generic: Path = ("ac", _conductors_key(key))

    paths: list[Path] = []
    if single and key.armour == Armour.ARMOURED:
        if not three:
            paths.append(("ac", "single_phase", "spaced" if group == "spaced" else "touching"))
        elif config == CableConfiguration.TREFOIL:
            paths.append(("ac", "three_phase", "trefoil"))
        else:
            paths.append(("ac", "three_phase", "flat_spaced" if group == "spaced" else "flat_touching"))
    elif group == "enclosed":
        paths.append(("ac", "method_ab", "3" if three else "2"))
    elif group == "touching" and single:
        table = config.value if three else "cables_touching"
        paths += [("ac", "method_cf", "touching", table), ("ac", "method_cfg", "touching", table)]
    elif group == "spaced":
        table = "flat_3" if three else "flat_2"
        paths += [("ac", "method_cf", "spaced", table), ("ac", "method_cfg", "spaced", table)]

    paths.append(generic)
    if single and key.insulation == Insulation.XLPE:
        paths.append(("ac", "method_cfg", "3" if three else "2"))
    return _dedupe(paths)


def resolve(key: ConstructionKey, concern: Concern) -> ResolvedKey | KeyResolutionGap:
    concern = Concern(concern)
    reason = check_supported(key)
    if reason is not None:
        return KeyResolutionGap(key=key, concern=concern, reason=reason)

    if concern == Concern.AMPACITY:
        section, paths = SECTION_CAPACITY, _capacity_paths(key)
    else:
        section, paths = SECTION_VOLTAGE_DROP, _voltage_drop_paths(key)
    return ResolvedKey(key=key, concern=concern, branch=_branch(key), section=section, paths=paths)
