"""
Pydantic data models for detector state and API IO.
"""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional, Tuple

from moodcam.expressions import DEFAULT_COLOR, PENDING, label_for

class FaceBox(BaseModel):
    x: int
    y: int
    w: int
    h: int

class FaceResult(BaseModel):
    region: FaceBox
    landmarks: List[Tuple[int, int]] = Field(default_factory=list)
    scores: Dict[str, float] = Field(default_factory=dict)
    confidence: float = 1.0

class ExpressionState(BaseModel):
    """Read-only snapshot of the detector's current label and color."""
    model_config = ConfigDict(frozen=True)

    label: str = PENDING
    text: str = label_for(PENDING)
    color: str = DEFAULT_COLOR
    emoji: str = ""
    face_count: int = 0
    scores: Dict[str, float] = Field(default_factory=dict)
    ready: bool = False
    updated_at: Optional[float] = None



# session model


class SessionStatus(BaseModel):
    running: bool
    started_at: float | None = None
    models_ready: bool = False
    load_error: str | None = None
    tick_errors: int = 0
    state: ExpressionState | None = None
