"""
Pytest fixtures for doc gen service tests.
"""

import copy
import os
import re
from html.parser import HTMLParser

# IMPORTANT: Set environment variables BEFORE any imports from doc_gen_service
# so DocGenSettings is configured correctly when first loaded.
os.environ["ENVIRONMENT"] = "local"
os.environ["DOC_GEN_API_KEY"] = "test-api-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["MAX_CONCURRENT_REPORTS"] = "2"

import pytest

from doc_gen_service.layout.surface import RenderingSurface


# ============================================================================
# Scripted rendering surface
# ============================================================================

VOID_TAGS = {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "wbr"}

_ATTR_SELECTOR = re.compile(r'^\[([\w-]+)(?:="([^"]*)")?\]$')


class FakeNode:
    """Minimal DOM element: tag, attributes, ordered children."""

    def __init__(self, tag, attrs=None):
        self.tag = tag
        self.attrs = dict(attrs or {})
        self.parent = None
        self.children = []
        self.text = ""

    @property
    def id(self):
        return self.attrs.get("id")

    @property
    def classes(self):
        return (self.attrs.get("class") or "").split()

    def iter_descendants(self):
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def detach(self):
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def append(self, child):
        child.detach()
        child.parent = self
        self.children.append(child)

    def insert_after(self, child):
        child.detach()
        siblings = self.parent.children
        siblings.insert(siblings.index(self) + 1, child)
        child.parent = self.parent

    def matches(self, selector):
        if selector.startswith("#"):
            return self.id == selector[1:]
        if selector.startswith("."):
            return selector[1:] in self.classes
        match = _ATTR_SELECTOR.match(selector)
        if match:
            name, value = match.groups()
            if name not in self.attrs:
                return False
            return value is None or self.attrs[name] == value
        return self.tag == selector

    def to_html(self):
        if self.tag == "#document":
            return "".join(child.to_html() for child in self.children)
        attrs = "".join(
            f' {name}="{value}"' if value is not None else f" {name}"
            for name, value in self.attrs.items()
        )
        if self.tag in VOID_TAGS:
            return f"<{self.tag}{attrs}>"
        inner = self.text + "".join(child.to_html() for child in self.children)
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"


class _TreeBuilder(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root = FakeNode("#document")
        self._stack = [self.root]

    def handle_starttag(self, tag, attrs):
        node = FakeNode(tag, attrs)
        self._stack[-1].append(node)
        if tag not in VOID_TAGS:
            self._stack.append(node)

    def handle_startendtag(self, tag, attrs):
        self._stack[-1].append(FakeNode(tag, attrs))

    def handle_endtag(self, tag):
        for i in range(len(self._stack) - 1, 0, -1):
            if self._stack[i].tag == tag:
                del self._stack[i:]
                return

    def handle_data(self, data):
        if data.strip():
            self._stack[-1].text += data.strip()


def parse_html(html):
    builder = _TreeBuilder()
    builder.feed(html)
    builder.close()
    return builder.root


class FakeSurface(RenderingSurface):
    """
    In-memory rendering surface with scripted heights.

    A node whose id is in `heights` measures as that value; any other node
    measures as the sum of its children, so containers grow additively.
    Ids in `placed_heights` measure differently once inside a page, which
    models a block that reflows after being moved.
    """

    def __init__(self, heights=None, placed_heights=None):
        self.heights = dict(heights or {})
        self.placed_heights = dict(placed_heights or {})
        self.document = FakeNode("#document")
        self.loaded_html = None
        self.pdf_calls = []

    # --- RenderingSurface ---

    async def load(self, html):
        self.loaded_html = html
        self.document = parse_html(html)

    async def query(self, selector, root=None):
        matches = await self.query_all(selector, root)
        return matches[0] if matches else None

    async def query_all(self, selector, root=None):
        scope = root if root is not None else self.document
        return [node for node in scope.iter_descendants() if node.matches(selector)]

    async def attribute(self, node, name):
        return node.attrs.get(name)

    async def measure_height(self, node):
        return self.height_of(node)

    async def move_into(self, node, parent):
        parent.append(node)

    async def append_html(self, parent, html):
        node = parse_html(html).children[0]
        parent.append(node)
        return node

    async def insert_html_after(self, sibling, html):
        node = parse_html(html).children[0]
        sibling.insert_after(node)
        return node

    async def remove(self, node):
        node.detach()

    async def content(self):
        return self.document.to_html()

    async def pdf(self, width_px, height_px):
        self.pdf_calls.append((width_px, height_px))
        return b"%PDF-1.4 fake pdf content"

    # --- Inspection helpers ---

    def height_of(self, node):
        if node.id in self.placed_heights and self.on_page(node):
            return float(self.placed_heights[node.id])
        if node.id in self.heights:
            return float(self.heights[node.id])
        return sum(self.height_of(child) for child in node.children)

    def on_page(self, node):
        ancestor = node.parent
        while ancestor is not None:
            if "page" in ancestor.classes:
                return True
            ancestor = ancestor.parent
        return False

    def find(self, node_id):
        for node in self.document.iter_descendants():
            if node.id == node_id:
                return node
        return None

    def pages(self):
        return [node for node in self.document.iter_descendants() if "page" in node.classes]

    def page_layout(self):
        """Block ids per page: (content ids, footnote zone ids)."""
        layout = []
        for page in self.pages():
            content = next(c for c in page.children if "page-content" in c.classes)
            footnotes = next(c for c in page.children if "page-footnotes" in c.classes)
            layout.append((
                [child.id for child in content.children],
                [child.id for child in footnotes.children],
            ))
        return layout


def staged_markup(*blocks):
    """
    Unpaginated document with the given (id, kind) blocks in staging.

    Extra markup for a block can be passed as a third tuple item.
    """
    parts = []
    for block in blocks:
        block_id, kind = block[0], block[1]
        inner = block[2] if len(block) > 2 else ""
        parts.append(
            f'<div id="{block_id}" data-block-kind="{kind}" data-visibility="always">{inner}</div>'
        )
    return (
        '<html><body><div id="report-pages"></div>'
        f'<div id="report-blocks">{"".join(parts)}</div>'
        '</body></html>'
    )


@pytest.fixture
def make_surface():
    """Factory for scripted surfaces: make_surface(heights, html=None, placed_heights=None)."""
    async def _make(heights=None, html=None, placed_heights=None):
        surface = FakeSurface(heights, placed_heights)
        if html is not None:
            await surface.load(html)
        return surface
    return _make


@pytest.fixture
def markup():
    """Builder for unpaginated documents, see staged_markup()."""
    return staged_markup


# ============================================================================
# Report data
# ============================================================================

GENDERS = {
    "M": {"code": "M", "label": "Men", "extendedLabel": "Men", "color": "#1c3664"},
    "F": {"code": "F", "label": "Women", "extendedLabel": "Women", "color": "#1b75bb"},
    "X": {"code": "X", "label": "Non-binary", "extendedLabel": "Non-binary people", "color": "#00a54f"},
    "U": {"code": "U", "label": "Unknown", "extendedLabel": "Prefer not to say / Unknown", "color": "#444444"},
}


def _series(**values):
    return [{"genderChartInfo": GENDERS[code], "value": value} for code, value in values.items()]


SAMPLE_REPORT_DATA = {
    "companyName": "Acme Widgets Ltd.",
    "companyAddress": "123 Main St, Victoria BC",
    "reportStartDate": "January 1, 2023",
    "reportEndDate": "December 31, 2023",
    "naicsCode": "11",
    "naicsLabel": "Agriculture, forestry, fishing and hunting",
    "employeeCountRange": "50-299",
    "comments": "We are reviewing our pay bands.",
    "dataConstraints": None,
    "referenceGenderCategory": "Men",
    "chartSuppressedError": (
        "This measure cannot be displayed because there are insufficient data "
        "to meet disclosure requirements."
    ),
    "tableData": {
        "meanOvertimeHoursGap": _series(F=-2, X=1),
        "medianOvertimeHoursGap": _series(F=-1),
    },
    "chartData": {
        "meanHourlyPayGap": _series(M=0, F=12, X=5, U=3),
        # Non-binary suppressed in this chart only
        "medianHourlyPayGap": _series(M=0, F=10, U=4),
        "meanOvertimePayGap": _series(M=0, F=8, X=2, U=1),
        "medianOvertimePayGap": _series(M=0, F=6, X=2, U=1),
        "percentReceivingOvertimePay": _series(M=40, F=35, X=30, U=20),
        "meanBonusPayGap": [],
        "medianBonusPayGap": [],
        "percentReceivingBonusPay": _series(M=10, F=9, X=8, U=7),
        "hourlyPayQuartile1": _series(M=20, F=60, X=10, U=10),
        "hourlyPayQuartile2": _series(M=30, F=50, X=10, U=10),
        "hourlyPayQuartile3": _series(M=45, F=40, X=5, U=10),
        "hourlyPayQuartile4": _series(M=60, F=30, X=5, U=5),
        "hourlyPayQuartilesLegend": list(GENDERS.values()),
    },
    "chartSummaryText": {
        "meanHourlyPayGap": "Women earn $0.88 for every dollar that men earn.",
    },
    "explanatoryNotes": {
        "meanHourlyPayDiff": {"num": 1},
        "medianHourlyPayDiff": {"num": 2},
        "meanBonusPayDiff": {"num": 3},
        "payQuartiles": {"num": 4},
    },
    "isAllCalculatedDataSuppressed": False,
    "genderCodes": ["M", "F", "X", "U"],
    "isDraft": False,
}


@pytest.fixture
def report_data():
    """A fresh camelCase report payload; safe to mutate per test."""
    return copy.deepcopy(SAMPLE_REPORT_DATA)


@pytest.fixture
def submitted(report_data):
    """The sample payload parsed into SubmittedReportData."""
    from doc_gen_service.models import SubmittedReportData
    return SubmittedReportData.model_validate(report_data)


@pytest.fixture
def api_headers():
    """Headers accepted by the API key check."""
    return {"x-api-key": "test-api-key", "x-correlation-id": "test-correlation-id"}
