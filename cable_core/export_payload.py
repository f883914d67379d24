from __future__ import annotations

from datetime import datetime, timezone

from .models import SizingError, SizingIssue, SizingRequest, SizingResult

PAYLOAD_VERSION = "1.0"


def _iso_utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _round(value: float | None, digits: int) -> float | None:
    if value is None:
        return None
    return round(float(value), digits)


def _issue_payload(issue: SizingIssue) -> dict:
    return {
        "category": issue.category.value,
        "message": issue.message,
        "size_mm2": issue.size_mm2,
        "value": _round(issue.value, 3),
    }


def _result_payload(result: SizingResult) -> dict:
    return {
        "recommended_size_mm2": {
            "for_current_capacity": result.ampacity_size_mm2,
            "for_voltage_drop": result.voltage_drop_size_mm2,
            "final": result.final_size_mm2,
        },
        "required_current_a": _round(result.required_current_a, 1),
        "temperature_factor": result.temperature_factor,
        "grouping_factor": result.grouping_factor,
        "table_ampacity_a": result.table_ampacity_a,
        "derated_ampacity_a": _round(result.derated_ampacity_a, 1),
        "voltage_drop_v": _round(result.drop_v, 2),
        "voltage_drop_pct": _round(result.drop_pct, 2),
        "voltage_drop_status": result.status.value,
        "voltage_drop_status_message": result.status_message,
        "voltage_drop_acceptable": result.status.is_acceptable,
        "voltage_drop_factor": result.vd_factor,
        "voltage_drop_factor_kind": result.vd_factor_kind,
        "examined_sizes_mm2": list(result.examined_sizes),
        "tables": {
            "capacity": result.capacity_path,
            "voltage_drop": result.vd_path,
        },
        "issues": [_issue_payload(i) for i in result.issues],
        "reference_version": result.reference_version,
    }


def _error_payload(error: SizingError) -> dict:
    return {
        "category": error.category.value,
        "message": error.message,
        "attempted_key": error.attempted_key.to_dict(),
        "attempted_paths": list(error.attempted_paths),
    }


def build_payload(
    outcome: SizingResult | SizingError,
    request: SizingRequest | None = None,
    *,
    generated_at: str | None = None,
) -> dict:
    """JSON-ready view of one sizing outcome for the presentation/export layer."""
    payload: dict = {
        "version": PAYLOAD_VERSION,
        "generated_at": generated_at or _iso_utc_now(),
        "request": request.to_dict() if request is not None else None,
    }
    if isinstance(outcome, SizingResult):
        payload["ok"] = True
        payload["result"] = _result_payload(outcome)
    elif isinstance(outcome, SizingError):
        payload["ok"] = False
        payload["error"] = _error_payload(outcome)
    else:
        raise ValueError(f"Unsupported outcome type: {type(outcome).__name__}")
    return payload
