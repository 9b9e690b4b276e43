"""Playwright-backed SDK hooks: screenshots, title and viewport come from a live Page."""

from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Page

from eyes_session.models.config import EyesConfig
from eyes_session.models.geometry import RectangleSize, Region
from eyes_session.session.connector import ServerConnector
from eyes_session.session.eyes_base import EyesBase
from eyes_session.session.match_task import Screenshot

logger = logging.getLogger(__name__)

SDK_VERSION = "0.1.0"


class PlaywrightEyes(EyesBase):
    """Visual checkpoints for a Playwright page.

    The page is only read from (and resized when a viewport is requested);
    navigation and interaction stay with the caller.
    """

    def __init__(self, page: Page, connector: ServerConnector, config: EyesConfig | None = None):
        super().__init__(connector, config)
        self.page = page

    @property
    def base_agent_id(self) -> str:
        return f"eyes-session.playwright/{SDK_VERSION}"

    async def get_screenshot(self, region: Optional[Region] = None) -> Screenshot:
        size = await self.get_viewport_size()
        viewport = Region(width=size.width, height=size.height)
        if region is not None and not region.is_empty:
            # Only the visible part of the region can be captured
            visible = region.intersect(viewport)
            if not visible.is_empty:
                clip = {"x": visible.left, "y": visible.top, "width": visible.width, "height": visible.height}
                image = await self.page.screenshot(clip=clip, full_page=False)
                return Screenshot(image=image, bounds=visible)
            logger.debug("Region %s is outside the viewport, capturing the full viewport", region)

        image = await self.page.screenshot(full_page=False)
        return Screenshot(image=image, bounds=viewport)

    async def get_title(self) -> str:
        return await self.page.title()

    async def get_viewport_size(self) -> RectangleSize:
        size = self.page.viewport_size
        if size is None:
            # Contexts created with no_viewport report None; ask the window instead
            size = await self.page.evaluate(
                "() => ({width: window.innerWidth, height: window.innerHeight})"
            )
        return RectangleSize(width=size["width"], height=size["height"])

    async def set_viewport_size(self, size: RectangleSize) -> None:
        logger.debug("Setting viewport size to %s", size)
        await self.page.set_viewport_size({"width": size.width, "height": size.height})

    async def get_inferred_environment(self) -> str:
        user_agent = await self.page.evaluate("() => navigator.userAgent")
        return f"useragent:{user_agent}"
