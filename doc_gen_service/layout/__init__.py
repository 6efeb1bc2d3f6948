"""Paginated document layout engine.

Components, leaf first:
- surface: capability interface over the rendered document (+ Playwright)
- blocks: content blocks with a measurable height
- page: fixed-height page containers
- placement: greedy in-order placement across pages
- notes: empty-section removal and footnote placement
- assembler: section ordering and the per-request lifecycle
"""

from .assembler import AssemblyState, PageSummary, ReportAssembler, ReportDocument
from .blocks import BlockKind, ContentBlock, Visibility, collect_blocks
from .notes import place_footnotes, remove_empty_sections
from .page import PageContainer, PageGeometry
from .placement import PlacementEngine
from .surface import PlaywrightSurface, RenderingSurface, move_element_into, open_surface

__all__ = [
    # Surface
    "RenderingSurface",
    "PlaywrightSurface",
    "open_surface",
    "move_element_into",
    # Blocks
    "BlockKind",
    "ContentBlock",
    "Visibility",
    "collect_blocks",
    # Pages
    "PageContainer",
    "PageGeometry",
    # Placement
    "PlacementEngine",
    # Notes
    "place_footnotes",
    "remove_empty_sections",
    # Assembly
    "AssemblyState",
    "PageSummary",
    "ReportAssembler",
    "ReportDocument",
]
