"""Fixed-height page containers and their remaining vertical capacity."""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from ..errors import LayoutArgumentError
from .blocks import ContentBlock
from .surface import RenderingSurface, move_element_into

logger = logging.getLogger(__name__)

PAGE_CLASS = "page"
CONTENT_CLASS = "page-content"
FOOTNOTE_ZONE_CLASS = "page-footnotes"
WATERMARK_CLASS = "draft-watermark"


@dataclass(frozen=True)
class PageGeometry:
    """Physical page size in CSS pixels."""

    height: float
    margin_top: float = 0
    margin_bottom: float = 0

    def __post_init__(self):
        if self.budget <= 0:
            raise ValueError(
                f"Page height {self.height} leaves no content budget after margins "
                f"{self.margin_top}/{self.margin_bottom}"
            )

    @property
    def budget(self) -> float:
        """Vertical space available for content after margins."""
        return self.height - self.margin_top - self.margin_bottom

    @classmethod
    def from_settings(cls, settings) -> "PageGeometry":
        return cls(
            height=settings.page_height_px,
            margin_top=settings.page_margin_top_px,
            margin_bottom=settings.page_margin_bottom_px,
        )


def page_markup(number: int, draft: bool = False) -> str:
    """Markup of an empty page; draft pages carry the watermark from birth."""
    watermark = f'<div class="{WATERMARK_CLASS}">DRAFT</div>' if draft else ""
    return (
        f'<div class="{PAGE_CLASS}" data-page-number="{number}">'
        f'{watermark}'
        f'<div class="{CONTENT_CLASS}"></div>'
        f'<div class="{FOOTNOTE_ZONE_CLASS}"></div>'
        f'</div>'
    )


class PageContainer:
    """
    One physical page: a content stream plus a footnote zone.

    Both share the page budget. Pages never shrink; the only block ever
    taken back is the last one appended, when it overflows after reflow.
    """

    def __init__(
        self,
        surface: RenderingSurface,
        geometry: PageGeometry,
        number: int,
        node: Any,
        content: Any,
        footnote_zone: Any,
    ):
        self.surface = surface
        self.geometry = geometry
        self.number = number
        self.node = node
        self.content = content
        self.footnote_zone = footnote_zone
        self.blocks: List[ContentBlock] = []
        self.footnotes: List[ContentBlock] = []

    @classmethod
    async def create(
        cls,
        surface: RenderingSurface,
        geometry: PageGeometry,
        after: Optional["PageContainer"] = None,
        parent: Any = None,
        draft: bool = False,
    ) -> "PageContainer":
        """
        Insert a new page into the document flow.

        The page goes immediately after `after` when given; the first page of
        a document is appended into `parent` instead.

        Raises:
            LayoutArgumentError: If neither a previous page nor a parent is given
        """
        if after is not None:
            number = after.number + 1
            node = await surface.insert_html_after(after.node, page_markup(number, draft))
        elif parent is not None:
            number = 1
            node = await surface.append_html(parent, page_markup(number, draft))
        else:
            raise LayoutArgumentError("parent", "PageContainer.create")

        content = await surface.query(f".{CONTENT_CLASS}", node)
        footnote_zone = await surface.query(f".{FOOTNOTE_ZONE_CLASS}", node)
        logger.debug(f"Created page {number} (draft={draft})")
        return cls(surface, geometry, number, node, content, footnote_zone)

    async def used_height(self) -> float:
        """Height currently taken by content and footnotes, re-measured."""
        content_height = await self.surface.measure_height(self.content)
        footnote_height = await self.surface.measure_height(self.footnote_zone)
        return content_height + footnote_height

    async def remaining_height(self) -> float:
        """Budget minus what is placed; negative once a page overflows."""
        return self.geometry.budget - await self.used_height()

    @property
    def is_empty(self) -> bool:
        """Nothing placed yet, in either the content stream or the footnote zone."""
        return not self.blocks and not self.footnotes

    async def append(self, block: ContentBlock) -> None:
        """Move a block to the end of the content stream."""
        await move_element_into(self.surface, block.node, self.content)
        self.blocks.append(block)

    def release(self, block: ContentBlock) -> None:
        """
        Forget the last content block so it can be placed elsewhere.

        The node stays in this page until the next page's append moves it.

        Raises:
            ValueError: If block is not the last content block
        """
        if not self.blocks or self.blocks[-1] is not block:
            raise ValueError(f"Only the last block of page {self.number} can be released")
        self.blocks.pop()

    async def append_footnotes(self, block: ContentBlock) -> None:
        """Move a footnote group into the footnote zone."""
        await move_element_into(self.surface, block.node, self.footnote_zone)
        self.footnotes.append(block)
