"""
Scoring configuration store.

There is exactly one configuration document. Reads create it with the
defaults below when it is missing; updates patch only the supplied fields;
reset puts the defaults back. Callers pass the returned configuration into
the calculators explicitly.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from auth import Actor, require_admin
from database import SettingsRepository
from errors import ConfigurationValidationError
from schemas import ScoringConfiguration, ScoringConfigurationUpdate, SubjectType

logger = logging.getLogger(__name__)

# Components counted towards IA, per subject type
WEIGHT_FIELDS = {
    SubjectType.THEORY: ("ut_weight", "assignment_weight", "attendance_weight"),
    SubjectType.PRACTICAL: ("ut_weight", "practical_weight", "attendance_weight"),
}


def default_configuration() -> ScoringConfiguration:
    return ScoringConfiguration()


def _default_document() -> Dict[str, Any]:
    data = default_configuration().model_dump()
    data["updated_at"] = datetime.now(timezone.utc)
    return data


def get_configuration(repo: SettingsRepository) -> ScoringConfiguration:
    doc, created = repo.get_or_create(_default_document())
    if created:
        logger.info("Scoring configuration created with defaults")
    return ScoringConfiguration.model_validate(doc)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def _check_slabs(slabs: Any) -> None:
    if not isinstance(slabs, list):
        raise ConfigurationValidationError("attendance_slabs must be an array")
    for slab in slabs:
        if not isinstance(slab, dict) or slab.get("min") is None or slab.get("multiplier") is None:
            raise ConfigurationValidationError("Each slab must have min and multiplier")


def weight_mismatch(config: ScoringConfiguration, subject_type: SubjectType = SubjectType.THEORY) -> float:
    """How far the weights a subject type uses are from ``ia_total`` (0 when they agree)."""
    total = sum(getattr(config, name) for name in WEIGHT_FIELDS[subject_type])
    return round(total - config.ia_total, 2)


def configuration_warnings(config: ScoringConfiguration) -> List[str]:
    warnings = []
    for subject_type in WEIGHT_FIELDS:
        diff = weight_mismatch(config, subject_type)
        if diff != 0:
            warnings.append(
                f"{subject_type.value.capitalize()} weights add up to {round(config.ia_total + diff, 2)}, "
                f"but IA total is {config.ia_total}"
            )
    return warnings


def update_configuration(
    repo: SettingsRepository,
    patch: Dict[str, Any],
    actor: Optional[Actor],
) -> ScoringConfiguration:
    require_admin(actor)
    if not isinstance(patch, dict):
        raise ConfigurationValidationError("Settings update must be an object")

    try:
        if patch.get("attendance_slabs") is not None:
            _check_slabs(patch["attendance_slabs"])
        update = ScoringConfigurationUpdate.model_validate(patch)
    except ConfigurationValidationError as e:
        logger.warning(f"Rejected settings update: {e}")
        raise
    except ValidationError as e:
        message = _describe(e)
        logger.warning(f"Rejected settings update: {message}")
        raise ConfigurationValidationError(message) from e

    fields = update.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        return get_configuration(repo)

    fields["updated_at"] = datetime.now(timezone.utc)
    doc = repo.update(fields, _default_document())
    config = ScoringConfiguration.model_validate(doc)

    changed = sorted(k for k in fields if k != "updated_at")
    logger.info(f"Scoring configuration updated by {actor.user_id or 'admin'}: {', '.join(changed)}")
    for warning in configuration_warnings(config):
        logger.warning(warning)
    return config


def reset_configuration(repo: SettingsRepository, actor: Optional[Actor]) -> ScoringConfiguration:
    require_admin(actor)
    doc = repo.replace(_default_document())
    logger.info(f"Scoring configuration reset to defaults by {actor.user_id or 'admin'}")
    return ScoringConfiguration.model_validate(doc)
