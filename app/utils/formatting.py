# Unit-aware number formatting for indicator values (pt-BR grouping, as shown in the UI).
from __future__ import annotations

from typing import Optional

import numpy as np


def format_number_pt_br(value: float, decimals: int = 2) -> str:
    """1234567.891 -> '1.234.567,89'"""
    s = f"{value:,.{decimals}f}"
    return s.replace(",", "_").replace(".", ",").replace("_", ".")


def _normalize_unit(unit: Optional[str]) -> str:
    return (unit or "").lower().strip()


def format_value_with_unit(value: Optional[float], unit: Optional[str]) -> str:
    if value is None or not np.isfinite(value):
        return "-"

    u = _normalize_unit(unit)
    num = format_number_pt_br(float(value))

    if u == "r$" or "reais" in u or "mil" in u:
        return f"R$ {num}"
    if u == "%" or "a.a" in u or "percent" in u:
        return f"{num}%"
    if u in ("índice", "indice", "pts", "pontos"):
        return f"{num} pts"
    if unit and unit.strip():
        return f"{num} {unit.strip()}"
    return num


def get_unit_symbol(unit: Optional[str]) -> str:
    if not unit:
        return ""
    u = _normalize_unit(unit)
    if u == "r$" or "reais" in u:
        return "R$"
    if u == "%" or "a.a" in u:
        return "%"
    if u in ("índice", "indice", "pts"):
        return "pts"
    return unit
