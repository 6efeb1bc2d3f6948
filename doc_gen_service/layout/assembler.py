"""
Report assembly: turns the unpaginated report markup into fixed-height pages.

Sections are placed in a fixed order (header, charts, tables, employer
text, explanatory notes, footnotes). A report whose calculated data are all
suppressed short-circuits to a single "insufficient data" block on one page.

Each assembler serves exactly one request and moves through
ASSEMBLING -> PAGINATING -> FINALIZED without ever going back. If any step
fails, the assembler stays unfinished and refuses to serialize anything.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from ..errors import AssemblyStateError
from .blocks import BlockKind, ContentBlock, collect_blocks
from .notes import place_footnotes, remove_empty_sections
from .page import PageContainer, PageGeometry
from .placement import PlacementEngine
from .surface import RenderingSurface

logger = logging.getLogger(__name__)

PAGES_SELECTOR = "#report-pages"
STAGING_SELECTOR = "#report-blocks"

CONTENT_ORDER = (
    BlockKind.HEADER,
    BlockKind.CHART,
    BlockKind.TABLE,
    BlockKind.TEXT,
    BlockKind.NOTE_GROUP,
)


class AssemblyState(str, Enum):
    """Lifecycle of one report-generation request."""

    ASSEMBLING = "assembling"
    PAGINATING = "paginating"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class PageSummary:
    """What ended up on one page."""

    number: int
    block_ids: Tuple[str, ...]
    footnote_ids: Tuple[str, ...]
    used_height: float


@dataclass(frozen=True)
class ReportDocument:
    """The finalized, ordered sequence of pages."""

    pages: Tuple[PageSummary, ...]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def block_ids(self) -> List[str]:
        """Content block ids of all pages, concatenated in page order."""
        return [block_id for page in self.pages for block_id in page.block_ids]

    @property
    def footnote_ids(self) -> List[str]:
        """Footnote group ids of all pages, in page order."""
        return [group_id for page in self.pages for group_id in page.footnote_ids]


class ReportAssembler:
    """Orchestrates block ordering and placement for one report."""

    def __init__(self, surface: RenderingSurface, geometry: PageGeometry, draft: bool = False):
        self.surface = surface
        self.geometry = geometry
        self.draft = draft
        self.state = AssemblyState.ASSEMBLING
        self.document: Optional[ReportDocument] = None

    def _require(self, expected: AssemblyState) -> None:
        if self.state != expected:
            raise AssemblyStateError(expected.value, self.state.value)

    async def assemble(self, html: str) -> ReportDocument:
        """
        Load the report markup and paginate it.

        Args:
            html: Unpaginated report HTML from the template

        Returns:
            The finalized ReportDocument

        Raises:
            AssemblyStateError: If this assembler was already used
        """
        self._require(AssemblyState.ASSEMBLING)
        await self.surface.load(html)
        removed = await remove_empty_sections(self.surface)
        if removed:
            logger.debug(f"Removed {removed} empty note section(s)")

        pages_parent = await self.surface.query(PAGES_SELECTOR)
        staging = await self.surface.query(STAGING_SELECTOR)
        engine = PlacementEngine(self.surface, self.geometry, pages_parent, draft=self.draft)

        self.state = AssemblyState.PAGINATING
        insufficient = await collect_blocks(self.surface, BlockKind.INSUFFICIENT_DATA, staging)
        if insufficient:
            logger.info("All calculated data suppressed; building insufficient-data report")
            await engine.place(insufficient[:1])
        else:
            for kind in CONTENT_ORDER:
                await engine.place(await collect_blocks(self.surface, kind, staging))
            for group in await collect_blocks(self.surface, BlockKind.FOOTNOTE_GROUP, staging):
                await self._place_footnote_group(engine, group)

        if engine.current_page is None:
            await engine.new_page()
        if staging is not None:
            await self.surface.remove(staging)

        self.document = ReportDocument(
            pages=tuple([await self._summarize(page) for page in engine.pages])
        )
        self.state = AssemblyState.FINALIZED
        logger.info(f"Report paginated into {self.document.page_count} page(s)")
        return self.document

    async def _place_footnote_group(self, engine: PlacementEngine, group: ContentBlock) -> None:
        """
        Footnotes go on the current page if they fit, else on a fresh page.

        A group taller than a whole page is forced onto the first empty page
        it meets, which may be the current one.
        """
        page = engine.current_page or await engine.new_page()
        if await place_footnotes(page, group):
            return

        if not page.is_empty:
            page = await engine.new_page()
            if await place_footnotes(page, group):
                return

        logger.warning(f"Footnote group '{group.block_id}' exceeds an empty page; placing anyway")
        await page.append_footnotes(group)

    async def _summarize(self, page: PageContainer) -> PageSummary:
        return PageSummary(
            number=page.number,
            block_ids=tuple(block.block_id for block in page.blocks),
            footnote_ids=tuple(group.block_id for group in page.footnotes),
            used_height=await page.used_height(),
        )

    async def to_html(self) -> str:
        """Serialize the finalized document."""
        self._require(AssemblyState.FINALIZED)
        return await self.surface.content()

    async def to_pdf(self, page_width: int) -> bytes:
        """Rasterize the finalized document, one physical page per page."""
        self._require(AssemblyState.FINALIZED)
        return await self.surface.pdf(page_width, int(self.geometry.height))
