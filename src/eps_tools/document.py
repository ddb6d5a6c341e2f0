"""Document assembler: DSC header, page prolog, drawn content and footer.

Typical use::

    doc = EpsDocument()
    g = doc.graphics
    g.set_color(Color(255, 0, 0))
    g.fill_rect(10, 10, 80, 30)
    text = doc.finish('Plot', '', 100.0, 100.0, (0, 0, 100, 100))
"""

from __future__ import annotations

import logging
from datetime import date

from eps_tools.config import EpsConfig, get_default_creator, get_default_title
from eps_tools.graphics import EpsGraphics
from eps_tools.rendering import dsc
from eps_tools.rendering.writer import EpsWriter

logger = logging.getLogger(__name__)


class EpsDocument:
    """One single-page EPS document; ``finish`` may be called only once.

    Parameters:
        config: Per-document options; defaults to ``EpsConfig()``.
    """

    def __init__(self, config: EpsConfig | None = None) -> None:
        self.config = config if config is not None else EpsConfig()
        self._writer = EpsWriter()
        self._graphics: EpsGraphics | None = None

    @property
    def writer(self) -> EpsWriter:
        return self._writer

    @property
    def graphics(self) -> EpsGraphics:
        """Graphics context, created (and its initial state written) on first access."""
        if self._graphics is None:
            self._graphics = EpsGraphics(self._writer, self.config)
        return self._graphics

    @property
    def finished(self) -> bool:
        return self._writer.closed

    def append(self, line: str) -> None:
        """Append a raw content line."""
        self._writer.append(line)

    def finish(
        self,
        title: str,
        creator: str,
        page_width: float,
        page_height: float,
        bounds: tuple[float, float, float, float] | None = None,
        *,
        creation_date: date | None = None,
    ) -> str:
        """Close any open clip and return the complete document text.

        Parameters:
            title: ``%%Title`` value; empty uses the configured default.
            creator: ``%%Creator`` value; empty uses the configured default.
            page_width: Page width in points.
            page_height: Page height in points.
            bounds: Content bounds ``(min_x, min_y, max_x, max_y)`` in source
                units; defaults to the page rectangle.
            creation_date: ``%%CreationDate`` value; defaults to today.

        Raises:
            ValueError: Non-positive page size.
            RuntimeError: The document was already finished.
        """
        if self._writer.closed:
            raise RuntimeError('EPS document has already been finalized')
        bbox = dsc.bounding_box(page_width, page_height)
        if bounds is None:
            bounds = (0.0, 0.0, page_width, page_height)
        tx, ty, scale = dsc.page_mapping(page_width, page_height, bounds)
        if self._graphics is not None:
            self._graphics.close_clips()

        header = dsc.header_lines(
            title or get_default_title(),
            creator or get_default_creator(),
            bbox,
            creation_date if creation_date is not None else date.today(),
        )
        header.extend(dsc.start_page_lines(tx, ty, scale))
        footer = ''.join(line + '\n' for line in dsc.end_page_lines()) + dsc.footer_text()
        text = self._writer.finalize('\n'.join(header) + '\n', footer)
        logger.debug('Finished EPS document: bbox %s, scale %s, %d characters',
                     bbox, scale, len(text))
        return text
