"""Sleep helper shared by the demos that need visible timing."""

from __future__ import annotations

import asyncio
import time

from lessons.config import get_settings


def scaled(seconds: float) -> float:
    return seconds * get_settings().delay_scale


def pause(seconds: float) -> None:
    """Sleep unless ``DELAY_SCALE`` is 0."""
    delay = scaled(seconds)
    if delay > 0:
        time.sleep(delay)


async def apause(seconds: float) -> None:
    await asyncio.sleep(scaled(seconds))
