"""Content blocks: units of report markup with a measurable rendered height."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List

from .surface import RenderingSurface

KIND_ATTRIBUTE = "data-block-kind"
VISIBILITY_ATTRIBUTE = "data-visibility"


class BlockKind(str, Enum):
    """Semantic kind of a content block, as tagged in the template."""

    HEADER = "header"
    CHART = "chart"
    TABLE = "table"
    TEXT = "text"
    NOTE_GROUP = "note-group"
    FOOTNOTE_GROUP = "footnote-group"
    INSUFFICIENT_DATA = "insufficient-data"


class Visibility(str, Enum):
    """Whether the template always emits the block or only for some data."""

    ALWAYS = "always"
    CONDITIONAL = "conditional"


@dataclass(frozen=True)
class ContentBlock:
    """Handle to a rendered DOM subtree plus its kind tag.

    Height is never cached: it is page-independent but is always read back
    from the surface, since placement can reflow the block.
    """

    node: Any
    kind: BlockKind
    block_id: str = ""
    visibility: Visibility = Visibility.ALWAYS

    async def height(self, surface: RenderingSurface) -> float:
        return await surface.measure_height(self.node)


def kind_selector(kind: BlockKind) -> str:
    """CSS selector matching blocks of one kind."""
    return f'[{KIND_ATTRIBUTE}="{kind.value}"]'


async def collect_blocks(
    surface: RenderingSurface,
    kind: BlockKind,
    root: Any = None,
) -> List[ContentBlock]:
    """Wrap every node tagged with the given kind, in document order."""
    nodes = await surface.query_all(kind_selector(kind), root)
    blocks = []
    for node in nodes:
        block_id = await surface.attribute(node, "id") or ""
        visibility = await surface.attribute(node, VISIBILITY_ATTRIBUTE) or Visibility.ALWAYS.value
        blocks.append(ContentBlock(node, kind, block_id, Visibility(visibility)))
    return blocks
