"""
Explanatory-note and footnote handling.

Empty note sections are dropped before layout so no space is allocated for
them; footnote groups are then fitted into a page's footnote zone.
"""

import logging

from ..errors import LayoutArgumentError
from .blocks import ContentBlock
from .page import PageContainer
from .surface import RenderingSurface

logger = logging.getLogger(__name__)

NOTE_SECTION_SELECTOR = "[data-note-section]"
NOTE_ITEM_SELECTOR = "[data-note-item]"


async def remove_empty_sections(surface: RenderingSurface) -> int:
    """
    Remove every note or footnote section that has no note items.

    Running it again on the same document removes nothing more.

    Returns:
        Number of sections removed
    """
    removed = 0
    for section in await surface.query_all(NOTE_SECTION_SELECTOR):
        items = await surface.query_all(NOTE_ITEM_SELECTOR, section)
        if not items:
            name = await surface.attribute(section, "id") or "note section"
            await surface.remove(section)
            logger.debug(f"Removed empty {name}")
            removed += 1
    return removed


async def place_footnotes(page: PageContainer, group: ContentBlock) -> bool:
    """
    Try to put a footnote group into a page's footnote zone.

    The zone shares the page budget with the content stream. Failure to fit
    is a normal outcome, reported as False with the document untouched, so
    the caller can move on to another page.

    Returns:
        True if the group was placed on this page

    Raises:
        LayoutArgumentError: If page or group is None
    """
    if page is None:
        raise LayoutArgumentError("page", "place_footnotes")
    if group is None:
        raise LayoutArgumentError("group", "place_footnotes")

    group_height = await group.height(page.surface)
    if await page.remaining_height() < group_height:
        return False

    await page.append_footnotes(group)
    return True
