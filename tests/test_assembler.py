import unittest

from academic_calc import UNREACHABLE
from assembler import (
    AssessmentRecord,
    AttendanceRecord,
    assemble_performance,
    categorize_test_type,
    count_attendance,
    evaluate_subject,
)
from schemas import ScoringConfiguration, SubjectPerformanceInput, SubjectType


def _attendance(present, absent, late=0):
    return (
        [AttendanceRecord("present")] * present
        + [AttendanceRecord("absent")] * absent
        + [AttendanceRecord("late")] * late
    )


class AssembleTests(unittest.TestCase):
    def test_categorize(self):
        categories = {"Unit Test 1": "ut", "Lab Work": "practical", "Home Work": "assignment"}
        self.assertEqual(categorize_test_type("Lab Work", categories), "practical")
        self.assertEqual(categorize_test_type("Home Work", categories), "assignment")
        self.assertEqual(categorize_test_type("Surprise Quiz", categories), "ut")
        self.assertEqual(categorize_test_type(None), "ut")

    def test_count_attendance(self):
        self.assertEqual(count_attendance(_attendance(5, 2, late=1)), (5, 8))
        self.assertEqual(count_attendance([]), (0, 0))

    def test_assemble(self):
        records = [
            AssessmentRecord("ut", 20, 18),
            AssessmentRecord("ut", 25, None),
            AssessmentRecord("assignment", 10, 6),
            AssessmentRecord("assignment", 10, 8),
            AssessmentRecord("assignment", 10, None),
            AssessmentRecord("practical", 20, 15),
            AssessmentRecord("ese", 80, 60),
        ]
        perf = assemble_performance(records, _attendance(27, 3))
        self.assertEqual(perf.ut_scores, [18, None])
        self.assertEqual(perf.ut_max_marks, 25)
        self.assertEqual(perf.assignment_score, 7)
        self.assertEqual(perf.assignment_max_marks, 10)
        self.assertEqual(perf.practical_score, 15)
        self.assertEqual((perf.attended, perf.conducted), (27, 30))

    def test_unknown_category_counts_as_unit_test(self):
        records = [AssessmentRecord("ut", 20, 18), AssessmentRecord("quiz", 20, 16)]
        perf = assemble_performance(records, [])
        self.assertEqual(perf.ut_scores, [18, 16])
        self.assertEqual(evaluate_subject(perf, ScoringConfiguration()).ut_ia, 8.5)

    def test_assemble_without_records(self):
        perf = assemble_performance([], [])
        self.assertEqual(perf.ut_scores, [])
        self.assertEqual(perf.ut_max_marks, 20)
        self.assertIsNone(perf.assignment_score)
        self.assertIsNone(perf.practical_score)


class EvaluateTests(unittest.TestCase):
    def setUp(self):
        self.config = ScoringConfiguration()

    def test_theory_subject(self):
        perf = SubjectPerformanceInput(
            ut_scores=[18, 16], ut_max_marks=20,
            assignment_score=4, assignment_max_marks=5,
            practical_score=20, practical_max_marks=20,
            attended=27, conducted=30,
        )
        result = evaluate_subject(perf, self.config)
        self.assertEqual(result.ut_ia, 8.5)
        self.assertEqual(result.assignment_ia, 4.0)
        self.assertEqual(result.practical_ia, 0)
        self.assertEqual(result.attendance_percent, 90.0)
        self.assertEqual(result.attendance_ia, 4.0)
        self.assertEqual(result.total_ia, 16.5)
        self.assertEqual(result.ia_total, 20)
        self.assertTrue(result.eligible)
        self.assertEqual(result.classes_needed, 0)
        self.assertIsNone(result.risk_status)

    def test_practical_subject_swaps_assignment(self):
        perf = SubjectPerformanceInput(
            ut_scores=[10], ut_max_marks=20,
            assignment_score=5, assignment_max_marks=5,
            practical_score=15, practical_max_marks=20,
            attended=21, conducted=30,
            subject_type=SubjectType.PRACTICAL,
        )
        result = evaluate_subject(perf, self.config)
        self.assertEqual(result.assignment_ia, 0)
        self.assertEqual(result.practical_ia, 3.75)
        self.assertEqual(result.attendance_ia, 1.0)
        self.assertEqual(result.total_ia, 9.75)
        self.assertFalse(result.eligible)
        self.assertEqual(result.classes_needed, 6)
        self.assertEqual(result.risk_status, "warning")

    def test_unreachable_threshold(self):
        config = ScoringConfiguration(min_attendance_percent=100)
        result = evaluate_subject(SubjectPerformanceInput(attended=29, conducted=30), config)
        self.assertFalse(result.eligible)
        self.assertIs(result.classes_needed, UNREACHABLE)
        self.assertEqual(result.model_dump(mode="json")["classes_needed"], "unreachable")

    def test_empty_record(self):
        result = evaluate_subject(SubjectPerformanceInput(), self.config)
        self.assertEqual(result.total_ia, 0)
        self.assertEqual(result.attendance_percent, 0)
        self.assertFalse(result.eligible)
        self.assertIsNone(result.risk_status)

    def test_low_attendance_is_critical(self):
        result = evaluate_subject(SubjectPerformanceInput(attended=5, conducted=10), self.config)
        self.assertEqual(result.risk_status, "critical")

    def test_attended_over_conducted_rejected(self):
        with self.assertRaises(ValueError):
            SubjectPerformanceInput(attended=5, conducted=4)


if __name__ == "__main__":
    unittest.main()
