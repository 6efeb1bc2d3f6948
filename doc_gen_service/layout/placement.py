"""
Greedy, single-pass placement of content blocks onto pages.

Blocks keep their original order. A block that does not fit on the current
page is never split: it goes whole onto a new page. Heights are re-measured
after every mutation because inserting a block can reflow its container.
"""

import logging
from typing import Any, Iterable, List, Optional

from ..errors import LayoutArgumentError
from .blocks import ContentBlock
from .page import PageContainer, PageGeometry
from .surface import RenderingSurface

logger = logging.getLogger(__name__)


class PlacementEngine:
    """Assigns blocks, in order, to a growing stream of pages."""

    def __init__(
        self,
        surface: RenderingSurface,
        geometry: PageGeometry,
        pages_parent: Any,
        draft: bool = False,
    ):
        """Initialize engine.

        Args:
            surface: Rendering surface holding the document
            geometry: Page sizing; its budget drives every fits-check
            pages_parent: Node that receives the first page
            draft: Inject the draft watermark into every created page
        """
        if surface is None:
            raise LayoutArgumentError("surface", "PlacementEngine")
        if pages_parent is None:
            raise LayoutArgumentError("pages_parent", "PlacementEngine")
        self.surface = surface
        self.geometry = geometry
        self.pages_parent = pages_parent
        self.draft = draft
        self.pages: List[PageContainer] = []

    @property
    def current_page(self) -> Optional[PageContainer]:
        return self.pages[-1] if self.pages else None

    async def new_page(self) -> PageContainer:
        """Create a page right after the current one (or the first page)."""
        page = await PageContainer.create(
            self.surface,
            self.geometry,
            after=self.current_page,
            parent=self.pages_parent,
            draft=self.draft,
        )
        self.pages.append(page)
        return page

    async def place(self, blocks: Iterable[ContentBlock]) -> List[PageContainer]:
        """
        Place every block in order.

        Returns:
            All pages of the document so far

        Raises:
            LayoutArgumentError: If any block is None
        """
        for block in blocks:
            await self.place_block(block)
        return self.pages

    async def place_block(self, block: ContentBlock) -> PageContainer:
        """
        Place one block on the current page, or on a new page if it does not fit.

        A block that measured as fitting but overflows once appended (it grew
        after reflow) is rolled back onto a new page. A block taller than a
        whole empty page is still placed: on the current page if that page is
        empty, otherwise alone on a new page.

        Returns:
            The page the block landed on
        """
        if block is None:
            raise LayoutArgumentError("block", "PlacementEngine.place_block")

        page = self.current_page or await self.new_page()
        block_height = await block.height(self.surface)

        if not page.is_empty and await page.remaining_height() < block_height:
            page = await self.new_page()

        if not page.is_empty:
            await page.append(block)
            remaining = await page.remaining_height()
            if remaining >= 0:
                return page

            logger.debug(
                f"Block '{block.block_id or block.kind.value}' grew past page "
                f"{page.number} by {-remaining:.0f}px after reflow; moving to a new page"
            )
            page.release(block)
            page = await self.new_page()

        return await self.place_on(page, block)

    async def place_on(self, page: PageContainer, block: ContentBlock) -> PageContainer:
        """Append a block to a specific page regardless of fit, then re-measure."""
        if page is None:
            raise LayoutArgumentError("page", "PlacementEngine.place_on")
        if block is None:
            raise LayoutArgumentError("block", "PlacementEngine.place_on")

        await page.append(block)
        remaining = await page.remaining_height()
        if remaining < 0:
            logger.warning(
                f"Block '{block.block_id or block.kind.value}' overflows page "
                f"{page.number} by {-remaining:.0f}px"
            )
        return page
