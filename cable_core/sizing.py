"""
Sizing stages: ampacity scan, voltage-drop escalation, reconciliation.

All scans run over the capacity table's sizes in ascending numeric order and
never revisit a smaller size.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .keys import SystemType
from .models import SizingRequest, VoltageDropStatus
from .sizes import sizes_above
from .tables import CapacityTable, VdFactor, VoltageDropTable

logger = logging.getLogger(__name__)

# Tabulated mV/A/m values already express the line-to-line drop for
# three-phase circuits and the loop drop for single-phase and DC circuits.
PHASE_SCALING: dict[tuple[SystemType, int], float] = {
    (SystemType.AC, 1): 1.0,
    (SystemType.AC, 3): 1.0,
    (SystemType.DC, 1): 1.0,
}


@dataclass(frozen=True)
class AmpacitySelection:
    size_mm2: float
    table_ampacity_a: float
    required_current_a: float


@dataclass(frozen=True)
class AmpacityExhausted:
    largest_mm2: float
    largest_ampacity_a: float
    required_current_a: float

    @property
    def shortfall_a(self) -> float:
        return self.required_current_a - self.largest_ampacity_a


@dataclass(frozen=True)
class DropEvaluation:
    size_mm2: float
    factor: VdFactor
    drop_v: float
    drop_pct: float


@dataclass(frozen=True)
class VoltageDropCheck:
    size_mm2: float
    status: VoltageDropStatus
    evaluation: DropEvaluation | None
    examined: tuple[float, ...]

    @property
    def drop_v(self) -> float | None:
        return self.evaluation.drop_v if self.evaluation else None

    @property
    def drop_pct(self) -> float | None:
        return self.evaluation.drop_pct if self.evaluation else None


def required_current(design_current_a: float, temperature_factor: float, grouping_factor: float) -> float:
    derating = temperature_factor * grouping_factor
    if derating <= 0.0:
        raise ValueError("total derating must be > 0")
    return design_current_a / derating


def size_for_ampacity(required_current_a: float, table: CapacityTable) -> AmpacitySelection | AmpacityExhausted:
    sizes = table.sizes()
    if not sizes:
        raise ValueError("capacity table is empty")
    for size in sizes:
        ampacity = table.ampacity[size]
        if ampacity >= required_current_a:
            logger.debug("Ampacity: %.1f A -> %s mm² (%.1f A)", required_current_a, size, ampacity)
            return AmpacitySelection(size_mm2=size, table_ampacity_a=ampacity, required_current_a=required_current_a)
    largest = sizes[-1]
    logger.debug("Ampacity exhausted: %.1f A > %s mm²", required_current_a, largest)
    return AmpacityExhausted(
        largest_mm2=largest,
        largest_ampacity_a=table.ampacity[largest],
        required_current_a=required_current_a,
    )


def phase_scaling(system_type: SystemType, phase_count: int) -> float:
    try:
        return PHASE_SCALING[(SystemType(system_type), phase_count)]
    except KeyError:
        raise ValueError(f"No voltage-drop convention for {system_type} with phase_count={phase_count}") from None


def calc_drop_v(factor_mv_per_a_m: float, current_a: float, length_m: float, scaling: float = 1.0) -> float:
    if factor_mv_per_a_m <= 0:
        raise ValueError("factor must be > 0")
    if current_a < 0:
        raise ValueError("current_a must be >= 0")
    if length_m < 0:
        raise ValueError("length_m must be >= 0")
    return float(factor_mv_per_a_m) * current_a * length_m * scaling / 1000.0


def calc_drop_pct(drop_v: float, system_voltage_v: float) -> float:
    if system_voltage_v <= 0:
        raise ValueError("system_voltage_v must be > 0")
    return 100.0 * drop_v / system_voltage_v


def evaluate_drop(size_mm2: float, request: SizingRequest, vd_table: VoltageDropTable | None) -> DropEvaluation | None:
    """Drop at one size, or None when the VD table has no entry for it."""
    if vd_table is None:
        return None
    factor = vd_table.factor(size_mm2)
    if factor is None:
        return None
    scaling = phase_scaling(request.key.system_type, request.key.phase_count)
    drop_v = calc_drop_v(factor.value, request.design_current_a, request.length_m, scaling)
    return DropEvaluation(
        size_mm2=size_mm2,
        factor=factor,
        drop_v=drop_v,
        drop_pct=calc_drop_pct(drop_v, request.system_voltage_v),
    )


def within_limit(evaluation: DropEvaluation, max_vd_pct: float) -> bool:
    return evaluation.drop_pct <= max_vd_pct or math.isclose(evaluation.drop_pct, max_vd_pct)


def size_for_voltage_drop(
    start_mm2: float,
    request: SizingRequest,
    vd_table: VoltageDropTable | None,
    candidate_sizes: list[float],
) -> VoltageDropCheck:
    """
    Check the drop at start_mm2 and escalate through the larger candidate
    sizes until the limit is met, a size has no VD entry, or the candidates
    run out.
    """
    examined = [start_mm2]
    current = evaluate_drop(start_mm2, request, vd_table)
    if current is None:
        return VoltageDropCheck(start_mm2, VoltageDropStatus.DATA_UNAVAILABLE, None, tuple(examined))
    if within_limit(current, request.max_vd_pct):
        return VoltageDropCheck(start_mm2, VoltageDropStatus.ACCEPTABLE, current, tuple(examined))

    for size in sizes_above(candidate_sizes, start_mm2):
        examined.append(size)
        evaluation = evaluate_drop(size, request, vd_table)
        if evaluation is None:
            logger.debug("VD escalation halted: no entry for %s mm²", size)
            return VoltageDropCheck(size, VoltageDropStatus.DATA_UNAVAILABLE, None, tuple(examined))
        logger.debug("VD escalation: %s mm² -> %.2f%%", size, evaluation.drop_pct)
        if within_limit(evaluation, request.max_vd_pct):
            return VoltageDropCheck(size, VoltageDropStatus.INCREASED, evaluation, tuple(examined))
        current = evaluation

    return VoltageDropCheck(current.size_mm2, VoltageDropStatus.TOO_HIGH, current, tuple(examined))


def reconcile(ampacity_size_mm2: float, voltage_drop_size_mm2: float) -> float:
    """Larger of the two candidates; a tie keeps the ampacity-selected size."""
    if voltage_drop_size_mm2 > ampacity_size_mm2:
        return voltage_drop_size_mm2
    return ampacity_size_mm2


def finalize(
    ampacity_size_mm2: float,
    check: VoltageDropCheck,
    request: SizingRequest,
    vd_table: VoltageDropTable | None,
) -> VoltageDropCheck:
    """
    Reconcile and return the drop check that belongs to the final size.

    When the final size is not the size the VD stage evaluated, the drop is
    evaluated again at the final size and the status follows that evaluation.
    """
    final = reconcile(ampacity_size_mm2, check.size_mm2)
    if final == check.size_mm2:
        return check

    examined = check.examined if final in check.examined else (*check.examined, final)
    evaluation = evaluate_drop(final, request, vd_table)
    if evaluation is None:
        status = VoltageDropStatus.DATA_UNAVAILABLE
    elif within_limit(evaluation, request.max_vd_pct):
        status = VoltageDropStatus.ACCEPTABLE
    else:
        status = VoltageDropStatus.TOO_HIGH
    logger.debug("Drop re-evaluated at final size %s mm²: %s", final, status.value)
    return VoltageDropCheck(final, status, evaluation, examined)
