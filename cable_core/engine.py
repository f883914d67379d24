"""
Conductor sizing pipeline.

    request ─ validate ─ resolve(ampacity) ─ capacity table ─ derating ─ ampacity scan
            ─ resolve(voltage drop) ─ VD table ─ VD escalation ─ reconcile ─ result

Resolution and table failures are terminal and come back as SizingError.
Sizing shortfalls (ampacity exhausted, VD data missing, VD still too high)
are embedded in SizingResult.issues so a "closest available" answer can
still be shown. Nothing here raises for a domain-invalid request.
"""

from __future__ import annotations

import logging

from .derating import grouping_factor_for_method, temperature_factor
from .key_resolver import KeyResolutionGap, explain_missing_capacity, resolve
from .keys import Concern, ConstructionKey
from .models import (
    ErrorCategory,
    SizingError,
    SizingIssue,
    SizingRequest,
    SizingResult,
    VoltageDropStatus,
)
from .reference_data import ReferenceData, default_reference_data
from .sizes import format_size
from .sizing import (
    AmpacityExhausted,
    VoltageDropCheck,
    finalize,
    required_current,
    size_for_ampacity,
    size_for_voltage_drop,
)
from .tables import TableNotFound, VoltageDropTable, get_capacity_table, get_vd_table
from .validation import validate_request

logger = logging.getLogger(__name__)


def _vd_issue(check: VoltageDropCheck, max_vd_pct: float) -> SizingIssue | None:
    if check.status == VoltageDropStatus.DATA_UNAVAILABLE:
        return SizingIssue(
            category=ErrorCategory.VOLTAGE_DROP_DATA_UNAVAILABLE,
            message=f"VD data unavailable for size {format_size(check.size_mm2)}",
            size_mm2=check.size_mm2,
        )
    if check.status == VoltageDropStatus.TOO_HIGH and check.evaluation is not None:
        evaluation = check.evaluation
        return SizingIssue(
            category=ErrorCategory.VOLTAGE_DROP_EXCEEDED,
            message=(
                f"size {format_size(evaluation.size_mm2)} still exceeds {max_vd_pct:g}% "
                f"({evaluation.drop_pct:.2f}%)"
            ),
            size_mm2=evaluation.size_mm2,
            value=evaluation.drop_pct - max_vd_pct,
        )
    return None


class CableSizingEngine:
    """Sizes one circuit at a time against an injected, read-only catalog."""

    def __init__(self, reference: ReferenceData) -> None:
        self.reference = reference

    def _error(
        self,
        category: ErrorCategory,
        message: str,
        key: ConstructionKey,
        attempted: tuple[str, ...] = (),
    ) -> SizingError:
        logger.info("Sizing error (%s): %s", category.value, message)
        return SizingError(category=category, message=message, attempted_key=key, attempted_paths=attempted)

    def size(self, request: SizingRequest) -> SizingResult | SizingError:
        errors = validate_request(request)
        if errors:
            return self._error(ErrorCategory.INVALID_INPUT, "; ".join(errors), request.key)
        key = request.key

        cap_key = resolve(key, Concern.AMPACITY)
        if isinstance(cap_key, KeyResolutionGap):
            return self._error(ErrorCategory.KEY_RESOLUTION_GAP, cap_key.reason, key)

        cap_table = get_capacity_table(self.reference, cap_key)
        if isinstance(cap_table, TableNotFound):
            specific = explain_missing_capacity(key)
            if specific is not None:
                return self._error(ErrorCategory.KEY_RESOLUTION_GAP, specific, key, cap_table.attempted)
            return self._error(ErrorCategory.TABLE_NOT_FOUND, cap_table.message, key, cap_table.attempted)

        kt = temperature_factor(key.insulation, request.ambient_temp_c)
        kg = grouping_factor_for_method(key.method, request.circuits)
        required = required_current(request.design_current_a, kt, kg)

        issues: list[SizingIssue] = []
        selection = size_for_ampacity(required, cap_table)
        if isinstance(selection, AmpacityExhausted):
            ampacity_size = selection.largest_mm2
            issues.append(
                SizingIssue(
                    category=ErrorCategory.AMPACITY_EXHAUSTED,
                    message=(
                        f"No suitable size for the required CCC ({required:.1f} A); largest available "
                        f"is {format_size(selection.largest_mm2)} ({selection.largest_ampacity_a:g} A). "
                        "Consider parallel cables."
                    ),
                    size_mm2=selection.largest_mm2,
                    value=selection.shortfall_a,
                )
            )
        else:
            ampacity_size = selection.size_mm2

        vd_table: VoltageDropTable | None = None
        vd_key = resolve(key, Concern.VOLTAGE_DROP)
        if not isinstance(vd_key, KeyResolutionGap):
            found = get_vd_table(self.reference, vd_key)
            if isinstance(found, TableNotFound):
                logger.debug(found.message)
            else:
                vd_table = found

        check = size_for_voltage_drop(ampacity_size, request, vd_table, cap_table.sizes())
        final = finalize(ampacity_size, check, request, vd_table)
        final_size = final.size_mm2
        evaluation = final.evaluation

        vd_issue = _vd_issue(final, request.max_vd_pct)
        if vd_issue is not None:
            issues.append(vd_issue)

        table_ampacity = cap_table.at(final_size)
        if table_ampacity is None:  # pragma: no cover - final size always comes from the capacity table
            raise RuntimeError(f"final size {final_size} missing from {cap_table.path}")

        return SizingResult(
            ampacity_size_mm2=ampacity_size,
            voltage_drop_size_mm2=check.size_mm2,
            final_size_mm2=final_size,
            temperature_factor=kt,
            grouping_factor=kg,
            drop_v=evaluation.drop_v if evaluation else None,
            drop_pct=evaluation.drop_pct if evaluation else None,
            status=final.status,
            required_current_a=required,
            table_ampacity_a=table_ampacity,
            derated_ampacity_a=table_ampacity * kt * kg,
            vd_factor=evaluation.factor.value if evaluation else None,
            vd_factor_kind=evaluation.factor.kind.value if evaluation else None,
            capacity_path=cap_table.path,
            vd_path=vd_table.path if vd_table else None,
            examined_sizes=final.examined,
            issues=tuple(issues),
            reference_version=self.reference.version,
        )


def size_cable(request: SizingRequest, reference: ReferenceData | None = None) -> SizingResult | SizingError:
    """One-shot helper; uses the packaged catalog when none is given."""
    return CableSizingEngine(reference or default_reference_data()).size(request)
