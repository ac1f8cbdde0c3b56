"""
/settings — read and update user-tunable scheduler settings.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ...settings import DEFAULTS, get_settings, update_settings

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsPatch(BaseModel):
    horizon_days:                Optional[int]   = Field(None, ge=1,   le=28)
    max_consecutive_hours:       Optional[float] = Field(None, ge=1.0, le=12.0)
    break_gap_minutes:           Optional[int]   = Field(None, ge=0,   le=120)
    subject_imbalance_threshold: Optional[float] = Field(None, ge=0.1, le=1.0)
    split_threshold_minutes:     Optional[int]   = Field(None, ge=60,  le=480)


@router.get("")
def read_settings():
    """Return current settings with their defaults for reference."""
    current = get_settings()
    return {"settings": current, "defaults": DEFAULTS}


@router.put("")
def write_settings(patch: SettingsPatch):
    """Apply a partial update; unknown keys are ignored. Persists to data/settings.json."""
    data = {k: v for k, v in patch.model_dump().items() if v is not None}
    return {"settings": update_settings(data)}
