"""Session records exchanged with the comparison service and kept by the controller."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from eyes_session.models.geometry import RectangleSize
from eyes_session.models.match_settings import ImageMatchSettings
from eyes_session.models.triggers import MouseTrigger, TextTrigger


class WireModel(BaseModel):
    """Base for payloads the comparison service reads or writes (camelCase on the wire)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class BatchInfo(WireModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: Optional[str] = None
    started_at: str = Field(default_factory=lambda: time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()))

    def __str__(self) -> str:
        return f"{self.name} [{self.id}] - {self.started_at}"


class AppEnvironment(WireModel):
    os: Optional[str] = None
    hosting_app: Optional[str] = None
    display_size: Optional[RectangleSize] = None
    inferred: Optional[str] = None


class SessionStartInfo(WireModel):
    agent_id: str
    app_id_or_name: Optional[str] = None
    scenario_id_or_name: Optional[str] = None
    batch_info: BatchInfo
    env_name: Optional[str] = None
    environment: AppEnvironment
    default_match_settings: ImageMatchSettings
    branch_name: Optional[str] = None
    parent_branch_name: Optional[str] = None


class RunningSession(WireModel):
    session_id: str
    legacy_session_id: Optional[str] = None
    is_new_session: bool = False
    session_url: str = ""


@dataclass
class TestSession:
    """Mutable per-test state owned by a single controller instance."""
    __test__ = False

    is_open: bool = False
    app_name: Optional[str] = None
    test_name: Optional[str] = None
    viewport_size: Optional[RectangleSize] = None
    session_start_info: Optional[SessionStartInfo] = None
    running_session: Optional[RunningSession] = None
    pending_inputs: list[TextTrigger | MouseTrigger] = field(default_factory=list)
    retry_once_on_timeout: bool = False
    # Set by the first check_window; its last screenshot anchors trigger coordinates.
    match_task: Any = None
