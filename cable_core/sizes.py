from __future__ import annotations

import math
from typing import Iterable

# mm², ascending. Every capacity/VD table key must be a member.
STANDARD_SIZES_MM2: tuple[float, ...] = (
    1.0,
    1.5,
    2.5,
    4.0,
    6.0,
    10.0,
    16.0,
    25.0,
    35.0,
    50.0,
    70.0,
    95.0,
    120.0,
    150.0,
    185.0,
    240.0,
    300.0,
    400.0,
    500.0,
    630.0,
)


def parse_size(value: object) -> float:
    """Table keys arrive as YAML numbers or strings ("1.5", "95")."""
    if isinstance(value, bool):
        raise TypeError("size must be a number")
    try:
        size = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Not a conductor size: {value!r}") from exc
    if not math.isfinite(size) or size <= 0.0:
        raise ValueError(f"Conductor size must be positive and finite, got {value!r}")
    return size


def sorted_sizes(sizes: Iterable[float]) -> list[float]:
    # Table keys are not guaranteed to be stored in order.
    return sorted(float(s) for s in sizes)


def sizes_above(sizes: Iterable[float], start_mm2: float) -> list[float]:
    """Sizes strictly larger than start_mm2, ascending."""
    return [s for s in sorted_sizes(sizes) if s > start_mm2]


def format_size(size: float) -> str:
    if float(size).is_integer():
        return f"{int(size)} mm²"
    return f"{size:g} mm²"
