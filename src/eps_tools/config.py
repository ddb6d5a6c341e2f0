"""Configuration: per-document options and defaults read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable

from eps_tools.color import BLACK, WHITE, Color, ColorMode
from eps_tools.constants import DEFAULT_CREATOR, DEFAULT_TITLE
from eps_tools.geometry import Path
from eps_tools.rendering.state import Font, TextRenderingMode

logger = logging.getLogger(__name__)

# Turns (text, font, x, y) into filled glyph outlines in source space.
TextOutliner = Callable[[str, Font, float, float], 'Path | None']

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off')


@dataclass
class EpsConfig:
    """Options fixed for the lifetime of one document.

    Parameters:
        color_mode: Color space for vector operators and raster samples.
        text_rendering_mode: VECTOR fills glyph outlines from ``text_outliner``;
            TEXT writes literal ``show`` strings with a named font.
        text_outliner: Glyph outline provider for VECTOR mode.
        fill_image_background: Fill the destination rectangle with the
            background color inside the image operator sequence (legacy
            consumer compatibility).
        foreground: Initial paint color.
        background: Color used by ``clear_rect`` and image backgrounds.
    """

    color_mode: ColorMode = ColorMode.RGB
    text_rendering_mode: TextRenderingMode = TextRenderingMode.VECTOR
    text_outliner: TextOutliner | None = None
    fill_image_background: bool = False
    foreground: Color = BLACK
    background: Color = WHITE

    @classmethod
    def from_env(cls) -> EpsConfig:
        """Build from EPS_TOOLS_COLOR_MODE, EPS_TOOLS_TEXT_MODE, EPS_TOOLS_FILL_IMAGE_BACKGROUND.

        Invalid values are logged and the default is kept.
        """
        config = cls()
        mode_s = os.environ.get('EPS_TOOLS_COLOR_MODE', '').strip()
        if mode_s:
            try:
                config.color_mode = ColorMode.parse(mode_s)
            except ValueError as e:
                logger.error('Invalid EPS_TOOLS_COLOR_MODE %r: %s; using rgb', mode_s, e)
        text_s = os.environ.get('EPS_TOOLS_TEXT_MODE', '').strip()
        if text_s:
            try:
                config.text_rendering_mode = TextRenderingMode.parse(text_s)
            except ValueError as e:
                logger.error('Invalid EPS_TOOLS_TEXT_MODE %r: %s; using vector', text_s, e)
        fill_s = os.environ.get('EPS_TOOLS_FILL_IMAGE_BACKGROUND', '').strip().lower()
        if fill_s in _TRUE_VALUES:
            config.fill_image_background = True
        elif fill_s and fill_s not in _FALSE_VALUES:
            logger.error('Invalid EPS_TOOLS_FILL_IMAGE_BACKGROUND %r; using false', fill_s)
        return config


def get_default_title() -> str:
    """Return the fallback document title (EPS_TOOLS_TITLE env var or default)."""
    return os.environ.get('EPS_TOOLS_TITLE', '').strip() or DEFAULT_TITLE


def get_default_creator() -> str:
    """Return the fallback creator (EPS_TOOLS_CREATOR env var or library name)."""
    return os.environ.get('EPS_TOOLS_CREATOR', '').strip() or DEFAULT_CREATOR
