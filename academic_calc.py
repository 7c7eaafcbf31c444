"""
IA, attendance and eligibility calculations.

Every function here is pure and total: missing scores, zero max marks, zero
lectures and empty slab tables give a zero (or sentinel) result instead of
raising, so an incomplete academic record never blocks a report.
"""
from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional, Sequence, Union

from schemas import Unreachable

UNREACHABLE = Unreachable.UNREACHABLE

CRITICAL_ATTENDANCE_PERCENT = 60


def _round2(value: float) -> float:
    # halves round up: 1.125 -> 1.13
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _slab_field(slab: Any, name: str) -> float:
    if isinstance(slab, dict):
        return float(slab.get(name, 0) or 0)
    return float(getattr(slab, name, 0) or 0)


def resolve_slab(percentage: float, slabs: Optional[Iterable[Any]]) -> float:
    """Multiplier of the highest slab whose ``min`` is at or below ``percentage``."""
    if not slabs:
        return 0.0
    ordered = sorted(slabs, key=lambda s: _slab_field(s, "min"), reverse=True)
    for slab in ordered:
        if percentage >= _slab_field(slab, "min"):
            return _slab_field(slab, "multiplier")
    return 0.0


def _scaled(obtained: Optional[float], max_marks: float, weight: float) -> float:
    if obtained is None or max_marks is None or max_marks <= 0:
        return 0.0
    return _round2((obtained / max_marks) * weight)


def calc_ut_ia(ut_scores: Optional[Sequence[Optional[float]]], max_marks: float, ut_weight: float) -> float:
    """Average the unit tests that were actually taken, then scale to the UT weight."""
    if not ut_scores:
        return 0.0
    valid = [s for s in ut_scores if s is not None]
    if not valid:
        return 0.0
    return _scaled(sum(valid) / len(valid), max_marks, ut_weight)


def calc_assignment_ia(score: Optional[float], max_marks: float, assignment_weight: float) -> float:
    return _scaled(score, max_marks, assignment_weight)


def calc_practical_ia(score: Optional[float], max_marks: float, practical_weight: float) -> float:
    return _scaled(score, max_marks, practical_weight)


def calc_attendance_ia(percentage: float, attendance_weight: float, slabs: Optional[Iterable[Any]]) -> float:
    return _round2(attendance_weight * resolve_slab(percentage, slabs))


def calc_total_ia(*contributions: float) -> float:
    return _round2(sum(contributions))


def calc_attendance_percent(attended: int, conducted: int) -> float:
    if conducted <= 0:
        return 0.0
    return _round2((attended / conducted) * 100)


def calc_overall_attendance(subject_stats: Iterable[Any]) -> float:
    """Blend attendance across subjects, weighted by lectures conducted.

    This is total attended over total conducted, not a mean of the
    per-subject percentages.
    """
    total_attended = 0
    total_conducted = 0
    for stat in subject_stats:
        if isinstance(stat, dict):
            total_attended += stat.get("attended") or 0
            total_conducted += stat.get("conducted") or 0
        else:
            total_attended += getattr(stat, "attended", 0) or 0
            total_conducted += getattr(stat, "conducted", 0) or 0
    return calc_attendance_percent(total_attended, total_conducted)


def is_eligible(attendance_percent: float, min_percent: float) -> bool:
    return attendance_percent >= min_percent


def required_classes(conducted: int, attended: int, min_percent: float) -> Union[int, Unreachable]:
    """Extra classes, all attended, needed to reach ``min_percent``.

    Returns 0 when the student is already eligible and ``UNREACHABLE`` when
    the threshold is 100% or more and the student is short of it.
    """
    if is_eligible(calc_attendance_percent(attended, conducted), min_percent):
        return 0
    fraction = min_percent / 100
    if fraction >= 1:
        return UNREACHABLE
    needed = ((fraction * conducted) - attended) / (1 - fraction)
    # float noise like 6.0000000001 must not become 7
    return int(math.ceil(round(max(0.0, needed), 9)))


def attendance_risk(attendance_percent: float, min_percent: float, conducted: int) -> Optional[str]:
    """None when eligible or before any lecture, otherwise "critical" below 60% and "warning" above."""
    if conducted <= 0:
        return None
    if is_eligible(attendance_percent, min_percent):
        return None
    if attendance_percent < CRITICAL_ATTENDANCE_PERCENT:
        return "critical"
    return "warning"
