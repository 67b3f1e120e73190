# schemas/insight.py

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..db.enums import ActionImpact, ActionDifficulty, ActionStatus


# --- 1. Generator Output (pure value, not persisted as-is) ---

class WeekPlanItem(BaseModel):
    day: str
    action: str


class ActionSuggestion(BaseModel):
    """A ranked recommendation produced by the insight generator."""

    title: str
    description: str
    why_it_matters: str
    estimated_impact: ActionImpact
    difficulty: ActionDifficulty
    time_to_complete: str
    priority: int = Field(..., ge=1, le=5, description="1 is the most urgent.")


class InsightOutput(BaseModel):
    summary: str = Field(..., min_length=1)
    watch_outs: List[str] = Field(default_factory=list, max_length=2)
    week_plan: List[WeekPlanItem] = Field(..., min_length=7, max_length=7)
    actions: List[ActionSuggestion] = Field(default_factory=list, max_length=3)
    confidence: float = Field(..., ge=0.60, le=0.95)


# --- 2. API Output Schemas (persisted records) ---

class ActionOut(BaseModel):
    id: int
    insight_id: Optional[int]
    title: str
    description: str
    why_it_matters: str
    estimated_impact: ActionImpact
    difficulty: ActionDifficulty
    time_to_complete: str
    priority: int
    status: ActionStatus
    created_at: datetime
    completed_at: Optional[datetime] = None
    dismissed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InsightOut(BaseModel):
    id: int
    summary: str
    watch_outs: List[str]
    week_plan: List[WeekPlanItem]
    data_snapshot: Dict[str, Any]
    confidence: float
    created_at: datetime
    actions: List[ActionOut] = Field(default_factory=list)

    class Config:
        from_attributes = True


class InsightResponse(BaseModel):
    insight: InsightOut


class InsightListResponse(BaseModel):
    insights: List[InsightOut]


# --- 3. Action lifecycle ---

class ActionUpdate(BaseModel):
    status: ActionStatus = Field(..., description="New lifecycle status for the action.")


class ActionResponse(BaseModel):
    action: ActionOut


class ActionListResponse(BaseModel):
    actions: List[ActionOut]
    counts: Dict[str, int] = Field(default_factory=dict, description="Number of the user's actions per status.")
