"""Records user input triggers relative to the last captured screenshot."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from eyes_session.models.geometry import Location, Region
from eyes_session.models.triggers import MouseAction, MouseTrigger, TextTrigger

logger = logging.getLogger(__name__)


class TriggerRecorder:
    """Normalizes keyboard and mouse events into a pending-input queue.

    Coordinates arrive in page space and are stored relative to the bounds
    returned by ``bounds_provider``. While the provider returns None (no
    checkpoint has captured a screenshot yet) every event is ignored.
    """

    def __init__(
        self,
        pending_inputs: list,
        bounds_provider: Callable[[], Optional[Region]],
    ):
        self.pending_inputs = pending_inputs
        self.bounds_provider = bounds_provider

    def add_keyboard_trigger(self, control: Region, text: str) -> Optional[TextTrigger]:
        logger.debug("add_keyboard_trigger called with text %r for control %s", text, control)
        bounds = self.bounds_provider()
        if bounds is None:
            logger.debug("add_keyboard_trigger: no screenshot, ignoring text %r", text)
            return None

        if control.width > 0 and control.height > 0:
            clipped = control.intersect(bounds)
            if clipped.is_empty:
                logger.debug("add_keyboard_trigger: out of bounds, ignoring text %r", text)
                return None
            control = clipped.offset(-bounds.left, -bounds.top)
        else:
            control = Region()

        trigger = TextTrigger(control=control, text=text)
        self.pending_inputs.append(trigger)
        logger.debug("add_keyboard_trigger: added %s", trigger)
        return trigger

    def add_mouse_trigger(
        self, action: MouseAction, control: Region, cursor: Location,
    ) -> Optional[MouseTrigger]:
        """Record a mouse event; ``cursor`` is relative to ``control``."""
        bounds = self.bounds_provider()
        if bounds is None:
            logger.debug("add_mouse_trigger: no screenshot, ignoring %s", action)
            return None

        absolute = cursor.offset(control.left, control.top)
        if not bounds.contains(absolute):
            logger.debug("add_mouse_trigger: cursor %s out of bounds, ignoring %s", absolute, action)
            return None

        location = absolute.offset(-bounds.left, -bounds.top)
        if control.is_empty:
            # Degenerate control: keep only the cursor position
            control = Region(left=location.x, top=location.y, width=0, height=0)
        else:
            clipped = control.intersect(bounds)
            if clipped.is_empty:
                logger.debug("add_mouse_trigger: control %s out of bounds, ignoring %s", control, action)
                return None
            control = clipped.offset(-bounds.left, -bounds.top)

        trigger = MouseTrigger(mouse_action=action, control=control, location=location)
        self.pending_inputs.append(trigger)
        logger.debug("add_mouse_trigger: added %s", trigger)
        return trigger
