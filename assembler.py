from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import academic_calc
from schemas import IAResult, ScoringConfiguration, SubjectPerformanceInput, SubjectType

UT = "ut"
ASSIGNMENT = "assignment"
PRACTICAL = "practical"
ESE = "ese"
CATEGORIES = (UT, ASSIGNMENT, PRACTICAL, ESE)

DEFAULT_UT_MAX_MARKS = 20.0

PRESENT = "present"


@dataclass(frozen=True)
class AssessmentRecord:
    category: str
    max_score: float
    score: Optional[float] = None


@dataclass(frozen=True)
class AttendanceRecord:
    status: str = PRESENT


def categorize_test_type(test_type: Optional[str], categories: Optional[Dict[str, str]] = None) -> str:
    """Category of a configured test type; anything unknown counts as a unit test."""
    category = (categories or {}).get(test_type or "")
    if category in CATEGORIES:
        return category
    return UT


def count_attendance(records: Iterable[AttendanceRecord]) -> tuple[int, int]:
    """(attended, conducted) for one student in one subject. Only "present" counts as attended."""
    attended = 0
    conducted = 0
    for r in records:
        conducted += 1
        if (r.status or "").lower() == PRESENT:
            attended += 1
    return attended, conducted


def _mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def assemble_performance(
    assessments: Iterable[AssessmentRecord],
    attendance: Iterable[AttendanceRecord],
    subject_type: SubjectType = SubjectType.THEORY,
) -> SubjectPerformanceInput:
    ut_scores: List[Optional[float]] = []
    ut_max = 0.0
    assignment_scores: List[float] = []
    assignment_max = 0.0
    practical_scores: List[float] = []
    practical_max = 0.0

    for a in assessments:
        if a.category == UT:
            ut_scores.append(a.score)
            ut_max = max(ut_max, a.max_score)
        elif a.category == ASSIGNMENT:
            if a.score is not None:
                assignment_scores.append(a.score)
            assignment_max = max(assignment_max, a.max_score)
        elif a.category == PRACTICAL:
            if a.score is not None:
                practical_scores.append(a.score)
            practical_max = max(practical_max, a.max_score)
        elif a.category != ESE:
            # unknown categories count as unit tests
            ut_scores.append(a.score)
            ut_max = max(ut_max, a.max_score)
        # ESE marks are not part of IA

    attended, conducted = count_attendance(attendance)
    return SubjectPerformanceInput(
        ut_scores=ut_scores,
        ut_max_marks=ut_max or DEFAULT_UT_MAX_MARKS,
        assignment_score=_mean(assignment_scores),
        assignment_max_marks=assignment_max,
        practical_score=_mean(practical_scores),
        practical_max_marks=practical_max,
        attended=attended,
        conducted=conducted,
        subject_type=subject_type,
    )


def evaluate_subject(performance: SubjectPerformanceInput, config: ScoringConfiguration) -> IAResult:
    """IA marks and attendance verdict for one student in one subject.

    Theory subjects count UT, assignment and attendance. Practical subjects
    count the practical mark in place of the assignment mark.
    """
    ut_ia = academic_calc.calc_ut_ia(performance.ut_scores, performance.ut_max_marks, config.ut_weight)
    assignment_ia = 0.0
    practical_ia = 0.0
    if performance.subject_type == SubjectType.PRACTICAL:
        practical_ia = academic_calc.calc_practical_ia(
            performance.practical_score, performance.practical_max_marks, config.practical_weight
        )
    else:
        assignment_ia = academic_calc.calc_assignment_ia(
            performance.assignment_score, performance.assignment_max_marks, config.assignment_weight
        )

    percent = academic_calc.calc_attendance_percent(performance.attended, performance.conducted)
    attendance_ia = academic_calc.calc_attendance_ia(percent, config.attendance_weight, config.attendance_slabs)
    min_percent = config.min_attendance_percent

    return IAResult(
        ut_ia=ut_ia,
        assignment_ia=assignment_ia,
        practical_ia=practical_ia,
        attendance_ia=attendance_ia,
        total_ia=academic_calc.calc_total_ia(ut_ia, assignment_ia, practical_ia, attendance_ia),
        ia_total=config.ia_total,
        attendance_percent=percent,
        eligible=academic_calc.is_eligible(percent, min_percent),
        classes_needed=academic_calc.required_classes(performance.conducted, performance.attended, min_percent),
        risk_status=academic_calc.attendance_risk(percent, min_percent, performance.conducted),
    )
