"""User input triggers recorded between checkpoints."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from eyes_session.models.geometry import Location, Region


class MouseAction(str, Enum):
    CLICK = "Click"
    RIGHT_CLICK = "RightClick"
    DOUBLE_CLICK = "DoubleClick"
    MOVE = "Move"
    DOWN = "Down"
    UP = "Up"


class TextTrigger(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    trigger_type: Literal["Text"] = "Text"
    control: Region = Field(default_factory=Region)
    text: str = ""

    def __str__(self) -> str:
        return f"Text [{self.control.left},{self.control.top} {self.control.size}] {self.text}"


class MouseTrigger(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    trigger_type: Literal["Mouse"] = "Mouse"
    mouse_action: MouseAction
    control: Region = Field(default_factory=Region)
    location: Location = Field(default_factory=Location)

    def __str__(self) -> str:
        return (
            f"{self.mouse_action.value} [{self.control.left},{self.control.top} "
            f"{self.control.size}] {self.location.x},{self.location.y}"
        )


UserInputTrigger = Annotated[Union[TextTrigger, MouseTrigger], Field(discriminator="trigger_type")]
