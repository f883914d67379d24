"""
Reference-data asset: capacity and voltage-drop tables for copper conductors.

Layout of the asset (YAML):

    version: <str>
    standard_sizes_mm2: [1.5, 2.5, ...]      # optional, defaults to sizes.STANDARD_SIZES_MM2
    copper:
      <insulation>:
        <armour>:
          <arrangement>:
            capacity:      {<fragment path...>: {<size>: <amps>}}
            voltage_drop:  {<fragment path...>: {<size>: {r:, x:, z:}}}

The loaded value is deeply frozen (MappingProxyType / tuple) so one instance
can be shared between any number of callers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from .sizes import STANDARD_SIZES_MM2, parse_size

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_PATH = Path(__file__).resolve().parent / "data" / "cop_appendix6.yaml"

# levels below <arrangement>/<section>
MAX_FRAGMENT_DEPTH = 5

SECTION_CAPACITY = "capacity"
SECTION_VOLTAGE_DROP = "voltage_drop"
_VD_VALUE_KEYS = ("r", "x", "z")


def _freeze(obj: Any) -> Any:
    if isinstance(obj, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in obj.items()})
    if isinstance(obj, (list, tuple)):
        return tuple(_freeze(v) for v in obj)
    return obj


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_vd_entry(value: object) -> bool:
    return isinstance(value, Mapping) and any(k in value for k in _VD_VALUE_KEYS)


def _check_leaf_sizes(node: Mapping, where: str, sizes: tuple[float, ...]) -> None:
    for key in node.keys():
        size = parse_size(key)
        if not any(abs(size - s) < 1e-9 for s in sizes):
            raise ValueError(f"Non-standard size {key!r} in {where}")


def _check_tables(node: Mapping, where: str, sizes: tuple[float, ...]) -> None:
    if not node:
        return
    values = list(node.values())
    if all(_is_number(v) for v in values) or all(_is_vd_entry(v) for v in values):
        _check_leaf_sizes(node, where, sizes)
        return
    for key, child in node.items():
        if isinstance(child, Mapping):
            _check_tables(child, f"{where}.{key}", sizes)


@dataclass(frozen=True)
class ReferenceData:
    version: str
    sizes_mm2: tuple[float, ...]
    copper: Mapping[str, Any] = field(repr=False)
    source: str = "<memory>"

    @classmethod
    def from_mapping(cls, data: Mapping, *, source: str = "<memory>") -> "ReferenceData":
        if not isinstance(data, Mapping):
            raise ValueError(f"Reference data root must be a dict: {source}")
        version = data.get("version")
        if not isinstance(version, str) or not version.strip():
            raise ValueError(f"Reference data 'version' is required: {source}")
        copper = data.get("copper")
        if not isinstance(copper, Mapping):
            raise ValueError(f"Reference data section 'copper' must be a dict: {source}")

        raw_sizes = data.get("standard_sizes_mm2")
        if raw_sizes is None:
            sizes = STANDARD_SIZES_MM2
        else:
            if not isinstance(raw_sizes, (list, tuple)) or not raw_sizes:
                raise ValueError(f"'standard_sizes_mm2' must be a non-empty list: {source}")
            sizes = tuple(sorted(parse_size(s) for s in raw_sizes))

        _check_tables(copper, "copper", sizes)
        return cls(
            version=version.strip(),
            sizes_mm2=sizes,
            copper=_freeze(copper),
            source=source,
        )

    def section(self, branch: tuple[str, ...], section: str) -> Mapping | None:
        node: Any = self.copper
        for part in (*branch, section):
            if not isinstance(node, Mapping):
                return None
            node = node.get(part)
        return node if isinstance(node, Mapping) else None

    def node(self, branch: tuple[str, ...], section: str, fragment: tuple[str, ...]) -> Mapping | None:
        """
        Walk `fragment` below copper/<branch>/<section>.

        Fails closed: a missing or non-mapping node anywhere on the path, or a
        fragment deeper than MAX_FRAGMENT_DEPTH, returns None.
        """
        if len(fragment) > MAX_FRAGMENT_DEPTH:
            logger.debug("Fragment too deep (%d levels): %s", len(fragment), fragment)
            return None
        node: Any = self.section(branch, section)
        for part in fragment:
            if not isinstance(node, Mapping):
                return None
            node = node.get(part)
        return node if isinstance(node, Mapping) else None


def load_reference_data(path: str | Path) -> ReferenceData:
    ref_path = Path(path)
    text = ref_path.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    ref = ReferenceData.from_mapping(data, source=str(ref_path))
    logger.debug("Loaded reference data %s from %s", ref.version, ref_path)
    return ref


@lru_cache(maxsize=1)
def default_reference_data() -> ReferenceData:
    """The packaged catalog, loaded once per process."""
    return load_reference_data(DEFAULT_REFERENCE_PATH)
