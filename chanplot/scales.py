from __future__ import annotations

from decimal import Decimal, InvalidOperation

import numpy as np


def interval_ticks(origin: float, extent: float, n_int: int) -> np.ndarray:
    """Tick positions dividing [origin, extent] into ``n_int`` equal intervals."""
    if n_int <= 0:
        return np.asarray([origin, extent], dtype=np.float64)
    return np.linspace(origin, extent, n_int + 1, dtype=np.float64)


def generate_nice_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)
    if vmin > vmax:
        vmin, vmax = vmax, vmin

    span = _nice_number(vmax - vmin, round_result=False)
    step = _nice_number(span / max(target - 1, 1), round_result=True)
    tick_min = np.floor(vmin / step) * step
    tick_max = np.ceil(vmax / step) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e6 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.3e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def _nice_number(value: float, *, round_result: bool) -> float:
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    return float(nice_frac * (10**exp))


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    # Round the step to 12 significant digits so linspace drift (0.30000000000000004) does not leak.
    d = Decimal(f"{step:.12g}").normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
