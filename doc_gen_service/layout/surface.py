"""
Rendering surface: the live document the layout engine measures and mutates.

The engine only talks to the abstract RenderingSurface, so a headless
browser, another layout backend, or a scripted test double can stand behind it.
Every call is a round-trip to the surface and must be awaited before the next
one is issued; concurrent mutations of one document would race.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional

from ..errors import LayoutArgumentError

logger = logging.getLogger(__name__)

# Parse a single HTML fragment into a detached element.
_FRAGMENT_JS = """
(html) => {
    const template = document.createElement('template');
    template.innerHTML = html.trim();
    return template.content.firstElementChild;
}
"""


class RenderingSurface(ABC):
    """Capability interface over a rendered document.

    Nodes are opaque handles owned by the surface implementation.
    """

    @abstractmethod
    async def load(self, html: str) -> None:
        """Replace the document with the given markup."""

    @abstractmethod
    async def query(self, selector: str, root: Any = None) -> Optional[Any]:
        """First node matching the CSS selector, or None."""

    @abstractmethod
    async def query_all(self, selector: str, root: Any = None) -> List[Any]:
        """All nodes matching the CSS selector, in document order."""

    @abstractmethod
    async def attribute(self, node: Any, name: str) -> Optional[str]:
        """Value of an attribute on the node, or None."""

    @abstractmethod
    async def measure_height(self, node: Any) -> float:
        """Rendered height of the node in CSS pixels."""

    @abstractmethod
    async def move_into(self, node: Any, parent: Any) -> None:
        """Detach the node and append it as the parent's last child."""

    @abstractmethod
    async def append_html(self, parent: Any, html: str) -> Any:
        """Create a node from markup, append it to parent, return it."""

    @abstractmethod
    async def insert_html_after(self, sibling: Any, html: str) -> Any:
        """Create a node from markup, insert it right after sibling, return it."""

    @abstractmethod
    async def remove(self, node: Any) -> None:
        """Remove the node (and its subtree) from the document."""

    @abstractmethod
    async def content(self) -> str:
        """Serialize the current document to HTML."""

    @abstractmethod
    async def pdf(self, width_px: int, height_px: int) -> bytes:
        """Rasterize the current document to PDF bytes."""


class PlaywrightSurface(RenderingSurface):
    """RenderingSurface backed by a single Playwright page (one browser tab)."""

    def __init__(self, page):
        self._page = page

    async def load(self, html: str) -> None:
        await self._page.set_content(html, wait_until="networkidle")

    async def query(self, selector: str, root: Any = None) -> Optional[Any]:
        scope = root if root is not None else self._page
        return await scope.query_selector(selector)

    async def query_all(self, selector: str, root: Any = None) -> List[Any]:
        scope = root if root is not None else self._page
        return await scope.query_selector_all(selector)

    async def attribute(self, node: Any, name: str) -> Optional[str]:
        return await node.get_attribute(name)

    async def measure_height(self, node: Any) -> float:
        return float(await node.evaluate("el => el.getBoundingClientRect().height"))

    async def move_into(self, node: Any, parent: Any) -> None:
        await self._page.evaluate(
            "([el, parent]) => { parent.appendChild(el); }",
            [node, parent],
        )

    async def append_html(self, parent: Any, html: str) -> Any:
        handle = await parent.evaluate_handle(
            f"(parent, html) => parent.appendChild(({_FRAGMENT_JS})(html))",
            html,
        )
        return handle.as_element()

    async def insert_html_after(self, sibling: Any, html: str) -> Any:
        handle = await sibling.evaluate_handle(
            f"(sibling, html) => {{ const el = ({_FRAGMENT_JS})(html); sibling.after(el); return el; }}",
            html,
        )
        return handle.as_element()

    async def remove(self, node: Any) -> None:
        await node.evaluate("el => el.remove()")

    async def content(self) -> str:
        return await self._page.content()

    async def pdf(self, width_px: int, height_px: int) -> bytes:
        return await self._page.pdf(
            width=f"{width_px}px",
            height=f"{height_px}px",
            print_background=True,
            margin={"top": "0", "right": "0", "bottom": "0", "left": "0"},
        )


async def move_element_into(surface: RenderingSurface, node: Any, parent: Any) -> None:
    """
    Move node to be the last child of parent.

    Raises:
        LayoutArgumentError: If node or parent is None
    """
    if node is None:
        raise LayoutArgumentError("node", "move_element_into")
    if parent is None:
        raise LayoutArgumentError("parent", "move_element_into")
    await surface.move_into(node, parent)


@asynccontextmanager
async def open_surface(headless: bool = True, timeout_ms: int = 30000) -> AsyncIterator[PlaywrightSurface]:
    """
    Acquire a fresh rendering surface for one report-generation request.

    Launches Chromium, opens a page and yields a PlaywrightSurface. The
    browser is always closed on exit, including on error or cancellation,
    so surfaces are never shared between requests.
    """
    # Import here to avoid loading Playwright on startup
    from playwright.async_api import async_playwright

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            page = await browser.new_page()
            page.set_default_timeout(timeout_ms)
            logger.debug("Rendering surface acquired")
            yield PlaywrightSurface(page)
        finally:
            await browser.close()
            logger.debug("Rendering surface released")
