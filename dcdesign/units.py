"""
dcdesign/units.py
=================
Unit conversions used when presenting sizing results to imperial-unit users.

Pure functions, no state.
"""

from __future__ import annotations

from dcdesign.config import KW_TO_BTU_PER_H

M_TO_FT: float = 3.28084
LPS_TO_GPM: float = 15.8503


def c_to_f(celsius: float) -> float:
    return celsius * 9.0 / 5.0 + 32.0


def f_to_c(fahrenheit: float) -> float:
    return (fahrenheit - 32.0) * 5.0 / 9.0


def kw_to_btu(kw: float) -> float:
    """kW → BTU/h."""
    return kw * KW_TO_BTU_PER_H


def btu_to_kw(btu: float) -> float:
    """BTU/h → kW."""
    return btu / KW_TO_BTU_PER_H


def m_to_ft(metres: float) -> float:
    return metres * M_TO_FT


def ft_to_m(feet: float) -> float:
    return feet / M_TO_FT


def lps_to_gpm(lps: float) -> float:
    """Litres per second → US gallons per minute."""
    return lps * LPS_TO_GPM


def gpm_to_lps(gpm: float) -> float:
    return gpm / LPS_TO_GPM
