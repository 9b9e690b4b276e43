"""Configuration models for the visual checkpoint SDK."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from eyes_session.models.match_settings import FailureReport, ImageMatchSettings

DEFAULT_SERVER_URL = "https://eyesapi.applitools.com"
API_KEY_ENV_VAR = "APPLITOOLS_API_KEY"


class ViewportConfig(BaseModel):
    width: int = 1280
    height: int = 720


class BatchConfig(BaseModel):
    name: Optional[str] = None
    id: Optional[str] = None
    started_at: Optional[str] = None


class EyesConfig(BaseModel):
    # Connection
    server_url: str = DEFAULT_SERVER_URL
    api_key: Optional[str] = Field(default=None, validate_default=True)
    remove_session: bool = False

    # Short-circuits every public operation when set
    is_disabled: bool = False

    # Session identity
    agent_id: Optional[str] = None
    host_os: Optional[str] = None
    hosting_app: Optional[str] = None
    baseline_name: Optional[str] = None
    branch_name: Optional[str] = None
    parent_branch_name: Optional[str] = None
    batch: Optional[BatchConfig] = None
    viewport: Optional[ViewportConfig] = None

    # Matching
    default_match_settings: ImageMatchSettings = Field(default_factory=ImageMatchSettings)
    default_match_timeout_ms: int = 2000
    failure_report: FailureReport = FailureReport.ON_CLOSE

    # Baseline handling
    save_new_tests: bool = True
    save_failed_tests: bool = False

    @field_validator("api_key", mode="before")
    @classmethod
    def resolve_env_api_key(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and v.startswith("env:"):
            env_var = v[4:]
            resolved = os.environ.get(env_var)
            if resolved is None:
                raise ValueError(f"Environment variable '{env_var}' not set")
            return resolved
        if not v:
            return os.environ.get(API_KEY_ENV_VAR) or None
        return v

    @field_validator("failure_report", mode="before")
    @classmethod
    def coerce_failure_report(cls, v):
        # Unknown modes behave like OnClose
        if isinstance(v, FailureReport):
            return v
        try:
            return FailureReport(v)
        except ValueError:
            return FailureReport.ON_CLOSE

    @classmethod
    def load(cls, path: str | Path) -> "EyesConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            # The resolved api key never goes back to disk
            json.dump(self.model_dump(mode="json", exclude={"api_key"}), f, indent=2)
