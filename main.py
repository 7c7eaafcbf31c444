import os
import logging
from typing import Any, Dict
from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from auth import Actor, current_actor
from assembler import (
    AssessmentRecord,
    AttendanceRecord,
    CATEGORIES,
    assemble_performance,
    categorize_test_type,
    evaluate_subject,
)
from academic_calc import calc_overall_attendance
from database import db, get_settings_repository, SettingsRepository
from errors import AuthorizationError, ConfigurationValidationError
from schemas import AssembleIn, IAResult, OverallAttendanceIn, ScoringConfiguration, SubjectPerformanceInput
from scoring_config import configuration_warnings, get_configuration, reset_configuration, update_configuration

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Academic Scoring API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _settings_out(config: ScoringConfiguration) -> Dict[str, Any]:
    return {**config.model_dump(mode="json"), "warnings": configuration_warnings(config)}


@app.get("/")
def root():
    return {"message": "Academic Scoring API"}


@app.get("/test")
def test_database():
    resp = {
        "backend": "✅ Running",
        "database": "❌ Not Connected",
        "collections": []
    }
    try:
        if db is not None:
            resp["database"] = "✅ Connected"
            resp["collections"] = db.list_collection_names()
    except Exception as e:
        logger.warning(f"Database check failed: {e}")
        resp["error"] = str(e)
    return resp


# Academic settings (creates defaults if none exist)
@app.get("/academic-settings")
def read_settings(repo: SettingsRepository = Depends(get_settings_repository)):
    return _settings_out(get_configuration(repo))


@app.put("/academic-settings")
def write_settings(
    payload: Any = Body(...),
    repo: SettingsRepository = Depends(get_settings_repository),
    actor: Actor = Depends(current_actor),
):
    try:
        config = update_configuration(repo, payload, actor)
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ConfigurationValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _settings_out(config)


@app.post("/academic-settings/reset")
def reset_settings(
    repo: SettingsRepository = Depends(get_settings_repository),
    actor: Actor = Depends(current_actor),
):
    try:
        config = reset_configuration(repo, actor)
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"message": "Settings reset to defaults", "settings": _settings_out(config)}


# IA for one student in one subject, from inputs already shaped by the caller
@app.post("/ia/preview", response_model=IAResult)
def preview_ia(payload: SubjectPerformanceInput, repo: SettingsRepository = Depends(get_settings_repository)):
    return evaluate_subject(payload, get_configuration(repo))


# IA from raw test marks and attendance records
@app.post("/ia/assemble", response_model=IAResult)
def assemble_ia(payload: AssembleIn, repo: SettingsRepository = Depends(get_settings_repository)):
    assessments = [
        AssessmentRecord(
            category=t.category if t.category in CATEGORIES else categorize_test_type(t.test_type, payload.test_type_categories),
            max_score=t.max_score,
            score=t.score,
        )
        for t in payload.assessments
    ]
    attendance = [AttendanceRecord(status=r.status) for r in payload.attendance]
    performance = assemble_performance(assessments, attendance, payload.subject_type)
    return evaluate_subject(performance, get_configuration(repo))


@app.post("/attendance/overall")
def overall_attendance(payload: OverallAttendanceIn):
    return {"overall_attendance": calc_overall_attendance(payload.subjects)}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
