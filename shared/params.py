"""Declarative parameter schema for all effects.

An effect's parameter contract is defined as a list of ParamDef objects.
ParamSchema wraps the list and derives the dicts the rest of the code
uses (defaults, ranges, sections, choice counts) plus validation of raw
parameter dicts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from shared.validation import ValidationResult, clamp

log = logging.getLogger(__name__)


class ParamType(Enum):
    FLOAT = "float"
    INT = "int"
    CHOICE = "choice"
    BOOL = "bool"
    SEED = "seed"


@dataclass
class ParamDef:
    key: str
    type: ParamType
    default: Any
    section: str
    label: str = ""
    range: tuple | None = None  # (min, max) for continuous params
    choices: list[str] | None = None  # accepted values for CHOICE type


class ParamSchema:
    """Derives defaults, ranges and validation from a declarative param list."""

    def __init__(self, params: list[ParamDef]):
        self._params = params
        self._by_key: dict[str, ParamDef] = {p.key: p for p in params}

    def default_params(self) -> dict:
        return {p.key: p.default for p in self._params}

    def param_ranges(self) -> dict[str, tuple]:
        """Continuous params only (float/int with range)."""
        result = {}
        for p in self._params:
            if p.range is not None and p.type in (ParamType.FLOAT, ParamType.INT):
                result[p.key] = p.range
        return result

    def param_sections(self) -> dict[str, list[str]]:
        """Section name -> list of param keys."""
        sections: dict[str, list[str]] = {}
        for p in self._params:
            sections.setdefault(p.section, []).append(p.key)
        return sections

    def choice_ranges(self) -> dict[str, int]:
        """Choice/bool param -> number of options."""
        result = {}
        for p in self._params:
            if p.type == ParamType.CHOICE:
                result[p.key] = len(p.choices or [])
            elif p.type == ParamType.BOOL:
                result[p.key] = 2
        return result

    def validate_and_clamp(self, raw: dict) -> tuple[dict, ValidationResult]:
        """Validate and clamp a raw params dict.

        Unknown keys are dropped, uncastable values fall back to their
        default, numbers are clamped to range. Every change is recorded
        in the returned ValidationResult.
        """
        result = ValidationResult()
        cleaned = {}
        for key, value in raw.items():
            p = self._by_key.get(key)
            if p is None:
                result.correct(key, value, None, "unknown parameter dropped", log)
                continue
            cleaned[key] = self._coerce(p, value, result)
        return cleaned, result

    def _coerce(self, p: ParamDef, value, result: ValidationResult):
        # optional params default to None ("off")
        if value is None and p.default is None:
            return None

        if p.type == ParamType.SEED:
            if value is None:
                return None
            try:
                return int(value)
            except (TypeError, ValueError):
                return result.correct(p.key, value, p.default, "not an integer seed", log)

        if p.type == ParamType.CHOICE:
            name = getattr(value, "value", value)
            if name not in (p.choices or []):
                return result.correct(p.key, value, p.default,
                                      f"expected one of {p.choices}", log)
            return name

        if p.type == ParamType.BOOL:
            return bool(value)

        try:
            v = int(round(value)) if p.type == ParamType.INT else float(value)
        except (TypeError, ValueError):
            return result.correct(p.key, value, p.default, "not a number", log)
        if p.range:
            lo, hi = p.range
            v = clamp(result, p.key, v, lo, hi, log)
        return v

    def get(self, key: str) -> ParamDef | None:
        return self._by_key.get(key)

    def __iter__(self):
        return iter(self._params)

    def __len__(self):
        return len(self._params)
