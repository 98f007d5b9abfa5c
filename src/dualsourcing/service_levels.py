"""Newsvendor service level helpers."""

from __future__ import annotations

import math

Z_MODE_TWO_POINT = "two_point"
Z_MODE_NORMAL = "normal"

TWO_POINT_Z = 1.645

_MODE_ALIASES = {
    Z_MODE_TWO_POINT: Z_MODE_TWO_POINT,
    "two-point": Z_MODE_TWO_POINT,
    "coarse": Z_MODE_TWO_POINT,
    Z_MODE_NORMAL: Z_MODE_NORMAL,
    "inverse_normal": Z_MODE_NORMAL,
    "quantile": Z_MODE_NORMAL,
}


def normalize_z_mode(mode: str | None) -> str:
    if mode is None:
        return Z_MODE_TWO_POINT
    normalized = mode.strip().lower()
    if normalized in _MODE_ALIASES:
        return _MODE_ALIASES[normalized]
    raise ValueError(
        "z_mode must be one of: " f"{', '.join(sorted(_MODE_ALIASES))}."
    )


def critical_fractile(underage_cost: float, overage_cost: float) -> float:
    """Target service level balancing lost margin against leftover stock."""
    denominator = underage_cost + overage_cost
    if denominator <= 0:
        return 0.0
    return underage_cost / denominator


def two_point_z(fractile: float) -> float:
    return TWO_POINT_Z if fractile > 0.5 else 0.0


def normal_quantile(p: float) -> float:
    """Approximate the standard normal quantile (inverse CDF)."""
    if not 0.0 < p < 1.0:
        raise ValueError("Normal quantile requires 0 < p < 1.")

    a = (
        -3.969683028665376e01,
        2.209460984245205e02,
        -2.759285104469687e02,
        1.383577518672690e02,
        -3.066479806614716e01,
        2.506628277459239e00,
    )
    b = (
        -5.447609879822406e01,
        1.615858368580409e02,
        -1.556989798598866e02,
        6.680131188771972e01,
        -1.328068155288572e01,
    )
    c = (
        -7.784894002430293e-03,
        -3.223964580411365e-01,
        -2.400758277161838e00,
        -2.549732539343734e00,
        4.374664141464968e00,
        2.938163982698783e00,
    )
    d = (
        7.784695709041462e-03,
        3.224671290700398e-01,
        2.445134137142996e00,
        3.754408661907416e00,
    )

    p_low = 0.02425
    if p < p_low:
        q = math.sqrt(-2.0 * math.log(p))
        return (
            ((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5]
        ) / ((((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1.0)
    if p <= 1.0 - p_low:
        q = p - 0.5
        r = q * q
        return (
            (((((a[0] * r + a[1]) * r + a[2]) * r + a[3]) * r + a[4]) * r + a[5]) * q
        ) / (((((b[0] * r + b[1]) * r + b[2]) * r + b[3]) * r + b[4]) * r + 1.0)
    return -normal_quantile(1.0 - p)


def newsvendor_z(fractile: float, mode: str | None = None) -> float:
    """Safety factor for a critical fractile.

    The default two-point rule jumps from 0 to 1.645 at a fractile of one half.
    The normal mode uses the inverse normal CDF, clipped to the open interval.
    """
    normalized = normalize_z_mode(mode)
    if normalized == Z_MODE_TWO_POINT:
        return two_point_z(fractile)
    clipped = min(max(fractile, 1e-6), 1.0 - 1e-6)
    return normal_quantile(clipped)
