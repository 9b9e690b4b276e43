"""Checkpoint and end-of-session result structures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import Field

from eyes_session.models.session import WireModel
from eyes_session.models.triggers import UserInputTrigger


class AppOutput(WireModel):
    title: str = ""
    screenshot64: str = ""


class MatchWindowData(WireModel):
    """Payload for a single comparison attempt."""
    user_inputs: list[UserInputTrigger] = Field(default_factory=list)
    app_output: AppOutput = Field(default_factory=AppOutput)
    tag: str = ""
    ignore_mismatch: bool = False


class ReplaceWindowData(WireModel):
    user_inputs: list[UserInputTrigger] = Field(default_factory=list)
    tag: str = ""
    app_output: AppOutput = Field(default_factory=AppOutput)


class MatchResult(WireModel):
    as_expected: bool
    window_id: Optional[str] = None
    is_new_session: Optional[bool] = None


class ServerResults(WireModel):
    """Counters the comparison service returns when a session ends."""
    steps: int = 0
    matches: int = 0
    mismatches: int = 0
    missing: int = 0
    exact_matches: int = 0
    strict_matches: int = 0
    content_matches: int = 0
    layout_matches: int = 0
    none_matches: int = 0


class TestResults(ServerResults):
    __test__ = False

    test_name: Optional[str] = None
    app_name: Optional[str] = None
    is_new: bool = False
    session_id: Optional[str] = None
    legacy_session_id: Optional[str] = None
    url: str = ""
    is_passed: bool = False
    is_aborted: bool = False
    is_saved: bool = False

    @classmethod
    def load(cls, path: str | Path) -> "TestResults":
        """Load results from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Results file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls.model_validate(data)

    def save(self, path: str | Path) -> None:
        """Save results to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_payload(), f, indent=2)
