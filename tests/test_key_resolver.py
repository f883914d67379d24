from __future__ import annotations

import pytest

from cable_core.key_resolver import (
    KeyResolutionGap,
    ResolvedKey,
    available_configurations,
    available_methods,
    explain_missing_capacity,
    normalized_configuration,
    resolve,
)
from cable_core.keys import (
    Armour,
    Arrangement,
    CableConfiguration,
    Concern,
    ConstructionKey,
    InstallationMethod as M,
    Insulation,
    SystemType,
)


def _key(
    *,
    insulation: Insulation = Insulation.XLPE,
    armour: Armour = Armour.NON_ARMOURED,
    arrangement: Arrangement = Arrangement.SINGLE_CORE,
    phase_count: int = 3,
    method: M = M.C,
    configuration: CableConfiguration = CableConfiguration.STANDARD,
    system_type: SystemType = SystemType.AC,
) -> ConstructionKey:
    return ConstructionKey(
        insulation=insulation,
        armour=armour,
        arrangement=arrangement,
        phase_count=phase_count,
        method=method,
        configuration=configuration,
        system_type=system_type,
    )


def _resolved(key: ConstructionKey, concern: Concern) -> ResolvedKey:
    res = resolve(key, concern)
    assert isinstance(res, ResolvedKey), getattr(res, "reason", res)
    return res


def test_available_methods_per_construction() -> None:
    assert available_methods(Insulation.PVC, Armour.NON_ARMOURED, Arrangement.SINGLE_CORE) == [
        M.C, M.B, M.A, M.F_TOUCHING, M.F_SPACED_H, M.F_SPACED_V,
    ]
    assert available_methods(Insulation.XLPE, Armour.NON_ARMOURED, Arrangement.SINGLE_CORE)[-2:] == [
        M.G_SPACED_H, M.G_SPACED_V,
    ]
    assert available_methods(Insulation.XLPE, Armour.ARMOURED, Arrangement.MULTI_CORE) == [M.C, M.E]
    assert M.G_SPACED_H not in available_methods(Insulation.XLPE, Armour.ARMOURED, Arrangement.SINGLE_CORE)


def test_available_configurations() -> None:
    assert available_configurations(Arrangement.MULTI_CORE, M.C, 3) == [CableConfiguration.STANDARD]
    assert available_configurations(Arrangement.SINGLE_CORE, M.F_TOUCHING, 1) == [CableConfiguration.FLAT]
    assert available_configurations(Arrangement.SINGLE_CORE, M.F_SPACED_V, 3) == [
        CableConfiguration.FLAT, CableConfiguration.TREFOIL,
    ]
    assert available_configurations(Arrangement.SINGLE_CORE, M.B, 3) == [CableConfiguration.STANDARD]


def test_unsupported_configuration_falls_back_to_first_offered() -> None:
    assert normalized_configuration(_key(method=M.C)) == CableConfiguration.FLAT
    assert normalized_configuration(_key(method=M.A, configuration=CableConfiguration.TREFOIL)) == (
        CableConfiguration.STANDARD
    )
    assert normalized_configuration(
        _key(phase_count=1, method=M.F_TOUCHING, configuration=CableConfiguration.TREFOIL)
    ) == CableConfiguration.FLAT


@pytest.mark.parametrize(
    ("key", "fragment"),
    [
        (_key(armour=Armour.ARMOURED, method=M.A), "Method A"),
        (_key(method=M.E), "multi-core cables only"),
        (_key(arrangement=Arrangement.MULTI_CORE, method=M.F_TOUCHING), "single-core cables only"),
        (_key(armour=Armour.ARMOURED, method=M.G_SPACED_H), "Method G"),
        (_key(insulation=Insulation.PVC, method=M.G_SPACED_V), "XLPE single-core"),
        (_key(system_type=SystemType.DC, phase_count=3), "DC"),
        (_key(phase_count=2), "phase_count"),
    ],
)
def test_unsupported_combinations_are_gaps(key: ConstructionKey, fragment: str) -> None:
    for concern in Concern:
        res = resolve(key, concern)
        assert isinstance(res, KeyResolutionGap)
        assert fragment in res.reason
        assert res.concern == concern


def test_capacity_paths_single_core_method_c_three_phase() -> None:
    res = _resolved(_key(method=M.C, configuration=CableConfiguration.TREFOIL), Concern.AMPACITY)
    assert res.section == "capacity"
    assert res.branch == ("xlpe", "non_armoured", "single_core")
    assert res.paths == (("method_c", "3_trefoil"), ("method_c", "3"))
    assert res.attempted[0] == "copper.xlpe.non_armoured.single_core.capacity.method_c.3_trefoil"


def test_capacity_paths_multi_core_try_both_three_phase_spellings() -> None:
    res = _resolved(
        _key(insulation=Insulation.PVC, arrangement=Arrangement.MULTI_CORE, method=M.B),
        Concern.AMPACITY,
    )
    assert res.paths == (("method_b", "3_4"), ("method_b", "3"))


def test_capacity_paths_single_phase_and_spaced() -> None:
    res = _resolved(_key(phase_count=1, method=M.F_TOUCHING), Concern.AMPACITY)
    assert res.paths == (("method_f", "touching", "2"),)

    res = _resolved(_key(method=M.F_SPACED_V), Concern.AMPACITY)
    assert res.paths == (("method_f", "spaced", "vertical", "3"),)

    res = _resolved(_key(phase_count=1, method=M.G_SPACED_H), Concern.AMPACITY)
    assert res.paths == (("method_g", "horizontal", "2"),)


def test_armoured_spaced_dc_prefers_dc_column() -> None:
    key = _key(armour=Armour.ARMOURED, phase_count=1, method=M.F_SPACED_H, system_type=SystemType.DC)
    res = _resolved(key, Concern.AMPACITY)
    assert res.paths == (
        ("method_f", "spaced", "horizontal", "dc"),
        ("method_f", "spaced", "horizontal", "2"),
    )


def test_voltage_drop_paths_dc() -> None:
    key = _key(phase_count=1, method=M.F_SPACED_H, system_type=SystemType.DC)
    res = _resolved(key, Concern.VOLTAGE_DROP)
    assert res.section == "voltage_drop"
    assert res.paths == (("dc",),)


def test_voltage_drop_paths_single_core_touching() -> None:
    key = _key(method=M.F_TOUCHING, configuration=CableConfiguration.TREFOIL)
    res = _resolved(key, Concern.VOLTAGE_DROP)
    assert res.paths == (
        ("ac", "method_cf", "touching", "trefoil"),
        ("ac", "method_cfg", "touching", "trefoil"),
        ("ac", "3"),
        ("ac", "method_cfg", "3"),
    )


def test_voltage_drop_paths_enclosed_and_multi_core() -> None:
    res = _resolved(_key(insulation=Insulation.PVC, phase_count=1, method=M.B), Concern.VOLTAGE_DROP)
    assert res.paths == (("ac", "method_ab", "2"), ("ac", "2"))

    res = _resolved(
        _key(arrangement=Arrangement.MULTI_CORE, method=M.E, armour=Armour.ARMOURED),
        Concern.VOLTAGE_DROP,
    )
    assert res.paths == (("ac", "3_4"),)


def test_voltage_drop_paths_armoured_single_core() -> None:
    base = dict(armour=Armour.ARMOURED, insulation=Insulation.PVC)
    res = _resolved(_key(phase_count=1, method=M.F_SPACED_V, **base), Concern.VOLTAGE_DROP)
    assert res.primary_path == ("ac", "single_phase", "spaced")

    res = _resolved(_key(method=M.C, configuration=CableConfiguration.TREFOIL, **base), Concern.VOLTAGE_DROP)
    assert res.primary_path == ("ac", "three_phase", "trefoil")

    res = _resolved(_key(method=M.F_SPACED_H, configuration=CableConfiguration.FLAT, **base), Concern.VOLTAGE_DROP)
    assert res.primary_path == ("ac", "three_phase", "flat_spaced")


def test_resolution_is_independent_per_concern() -> None:
    key = _key(method=M.G_SPACED_H)
    cap = _resolved(key, Concern.AMPACITY)
    vd = _resolved(key, Concern.VOLTAGE_DROP)
    assert cap.primary_path == ("method_g", "horizontal", "3")
    assert vd.primary_path == ("ac", "method_cf", "spaced", "flat_3")


def test_explain_missing_capacity_only_for_armoured_single_core_free_air() -> None:
    assert explain_missing_capacity(_key(method=M.F_SPACED_H)) is None
    assert explain_missing_capacity(_key(armour=Armour.ARMOURED, method=M.C)) is None

    pvc = explain_missing_capacity(_key(insulation=Insulation.PVC, armour=Armour.ARMOURED, method=M.F_SPACED_H))
    assert pvc is not None
    assert "PVC" in pvc and "Method F" in pvc

    xlpe = explain_missing_capacity(_key(armour=Armour.ARMOURED, phase_count=1, method=M.F_SPACED_V))
    assert xlpe is not None
    assert "flat" in xlpe
    assert "2 loaded conductors" in xlpe
    assert "method_f_spaced_v" in xlpe


def test_construction_key_from_dict_defaults() -> None:
    key = ConstructionKey.from_dict({"insulation": "pvc", "arrangement": "multi_core", "method": "method_c"})
    assert key.armour == Armour.NON_ARMOURED
    assert key.phase_count == 3
    assert key.configuration == CableConfiguration.STANDARD
    assert key.system_type == SystemType.AC
    assert ConstructionKey.from_dict(key.to_dict()) == key
    with pytest.raises(ValueError):
        ConstructionKey.from_dict({"insulation": "rubber", "arrangement": "multi_core", "method": "method_c"})
