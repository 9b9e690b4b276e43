"""Match settings sent with a session and applied to each checkpoint."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class MatchLevel(str, Enum):
    NONE = "None"
    LAYOUT = "Layout"
    LAYOUT2 = "Layout2"
    CONTENT = "Content"
    STRICT = "Strict"
    EXACT = "Exact"


class FailureReport(str, Enum):
    # Mismatches fail the originating check_window call.
    IMMEDIATE = "Immediate"
    # Mismatches are judged when close() classifies the session.
    ON_CLOSE = "OnClose"


class ExactMatchSettings(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    min_diff_intensity: int = 0
    min_diff_width: int = 0
    min_diff_height: int = 0
    match_threshold: float = 0.0


class ImageMatchSettings(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    match_level: MatchLevel = MatchLevel.STRICT
    exact: Optional[ExactMatchSettings] = None
