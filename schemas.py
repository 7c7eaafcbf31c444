"""
Schemas for the Academic Scoring & Eligibility Engine

The scoring configuration is stored as a single document in MongoDB. The other
models are request/response shapes; nothing computed here is persisted.
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Union
from datetime import datetime
from enum import Enum


class SubjectType(str, Enum):
    THEORY = "theory"
    PRACTICAL = "practical"


class Unreachable(str, Enum):
    """Remedial target that no number of extra classes can reach."""
    UNREACHABLE = "unreachable"


class AttendanceSlab(BaseModel):
    min: float = Field(..., ge=0, le=100, description="Lowest attendance percentage for this slab")
    multiplier: float = Field(..., ge=0, le=1, description="Fraction of the attendance weight awarded")


DEFAULT_SLABS = [
    {"min": 90, "multiplier": 0.8},
    {"min": 80, "multiplier": 0.6},
    {"min": 75, "multiplier": 0.4},
    {"min": 65, "multiplier": 0.2},
    {"min": 0, "multiplier": 0},
]


class ScoringConfiguration(BaseModel):
    ia_total: float = Field(20, ge=0, description="Internal assessment marks")
    ese_total: float = Field(80, ge=0, description="End semester exam marks")
    ut_weight: float = Field(10, ge=0, description="IA marks from unit tests")
    assignment_weight: float = Field(5, ge=0, description="IA marks from assignments")
    attendance_weight: float = Field(5, ge=0, description="IA marks from attendance")
    practical_weight: float = Field(5, ge=0, description="IA marks from practicals")
    min_attendance_percent: float = Field(75, ge=0, le=100, description="Minimum attendance for eligibility")
    min_ese_percent: float = Field(40, ge=0, le=100, description="Minimum ESE percentage to pass")
    attendance_slabs: List[AttendanceSlab] = Field(
        default_factory=lambda: [AttendanceSlab(**s) for s in DEFAULT_SLABS]
    )
    updated_at: Optional[datetime] = None


class ScoringConfigurationUpdate(BaseModel):
    """Partial update; fields left out are not touched."""
    ia_total: Optional[float] = Field(None, ge=0)
    ese_total: Optional[float] = Field(None, ge=0)
    ut_weight: Optional[float] = Field(None, ge=0)
    assignment_weight: Optional[float] = Field(None, ge=0)
    attendance_weight: Optional[float] = Field(None, ge=0)
    practical_weight: Optional[float] = Field(None, ge=0)
    min_attendance_percent: Optional[float] = Field(None, ge=0, le=100)
    min_ese_percent: Optional[float] = Field(None, ge=0, le=100)
    attendance_slabs: Optional[List[AttendanceSlab]] = None


class SubjectPerformanceInput(BaseModel):
    ut_scores: List[Optional[float]] = Field(default_factory=list, description="Unit test scores, null if absent")
    ut_max_marks: float = 20
    assignment_score: Optional[float] = None
    assignment_max_marks: float = 0
    practical_score: Optional[float] = None
    practical_max_marks: float = 0
    attended: int = Field(0, ge=0)
    conducted: int = Field(0, ge=0)
    subject_type: SubjectType = SubjectType.THEORY

    @model_validator(mode="after")
    def attended_within_conducted(self):
        if self.attended > self.conducted:
            raise ValueError("attended cannot exceed conducted")
        return self


class IAResult(BaseModel):
    ut_ia: float
    assignment_ia: float
    practical_ia: float
    attendance_ia: float
    total_ia: float
    ia_total: float
    attendance_percent: float
    eligible: bool
    classes_needed: Union[int, Unreachable]
    risk_status: Optional[str] = None


class SubjectAttendance(BaseModel):
    attended: int = Field(0, ge=0)
    conducted: int = Field(0, ge=0)


class OverallAttendanceIn(BaseModel):
    subjects: List[SubjectAttendance] = Field(default_factory=list)


class AssessmentRecordIn(BaseModel):
    test_type: Optional[str] = None
    category: Optional[str] = None
    max_score: float = Field(..., gt=0)
    score: Optional[float] = Field(None, ge=0)


class AttendanceRecordIn(BaseModel):
    status: str = "present"


class AssembleIn(BaseModel):
    assessments: List[AssessmentRecordIn] = Field(default_factory=list)
    attendance: List[AttendanceRecordIn] = Field(default_factory=list)
    subject_type: SubjectType = SubjectType.THEORY
    test_type_categories: dict = Field(default_factory=dict, description="Test type name -> category")
