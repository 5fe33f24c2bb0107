"""
API Schemas — Request and Response Models

Pydantic models for the observation API.
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field

from observation_engine.config import settings


# ============================================================
# CLASSIFY
# ============================================================

class ClassifyRequest(BaseModel):
    """POST /observations/classify request body."""
    text: str = Field(..., max_length=settings.MAX_SUBMISSION_CHARS,
                      description="One observation line. Blank text is allowed.")

    model_config = {"json_schema_extra": {"examples": [
        {"text": "The word 'ran' appears in verse 20."},
    ]}}


class ClassificationResponse(BaseModel):
    valid: bool
    outcome_type: str
    points: int
    feedback: str
    matched_rule: Optional[str] = None


class LineResultResponse(ClassificationResponse):
    text: str


class SubmissionRequest(BaseModel):
    """POST /observations/submission request body."""
    text: str = Field(..., max_length=settings.MAX_SUBMISSION_CHARS,
                      description="Multi-line submission; blank lines are ignored.")


class AggregateResponse(BaseModel):
    per_line: list[LineResultResponse]
    total_points: int
    valid_count: int
    penalty_count: int


# ============================================================
# DECOY CHECK
# ============================================================

class DecoyCheckRequest(BaseModel):
    """POST /observations/decoy-check request body."""
    observation: str = Field(..., max_length=settings.MAX_SUBMISSION_CHARS)
    actual_verbs: list[str] = Field(default_factory=list, max_length=500)
    decoy_verbs: list[str] = Field(default_factory=list, max_length=500)


class DecoyCheckResponse(BaseModel):
    is_decoy: bool
    verb: Optional[str] = None


# ============================================================
# LEVELS
# ============================================================

class LevelSubmitRequest(BaseModel):
    """POST /packs/{pack_id}/levels/{level_id}/submit request body."""
    text: str = Field(..., max_length=settings.MAX_SUBMISSION_CHARS)
    starting_score: int = Field(0, ge=0, description="Game score before this submission.")


class LevelSubmitResponse(AggregateResponse):
    pack_id: str
    level_id: int
    decoys: list[str]
    starting_score: int
    final_score: int


class VerbBlockResponse(BaseModel):
    text: str
    subject: Optional[str] = None
    is_phrase: bool = False


class LevelResponse(BaseModel):
    id: int
    reference: str
    text: str
    verbs: list[VerbBlockResponse]
    subject_anchors: list[str]
    decoy_verbs: list[str]
    expected_observations: list[str]


class LevelSummary(BaseModel):
    id: int
    reference: str


class PackResponse(BaseModel):
    id: str
    name: str
    description: str
    floor: int
    room_code: str
    levels: list[LevelSummary]


class PacksResponse(BaseModel):
    packs: list[PackResponse]
    total: int


# ============================================================
# RULES & HEALTH
# ============================================================

class RuleResponse(BaseModel):
    id: str
    name: str
    description: str
    tier: str
    priority: int
    points: int
    requires_quote: bool
    feedback: str


class RulesResponse(BaseModel):
    registry_version: str
    total_rules: int
    rules: list[RuleResponse]


class HealthResponse(BaseModel):
    status: str
    version: str
    registry_version: str
    rule_count: int
    pack_count: int
