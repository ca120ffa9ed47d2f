"""
Shared fixtures: in-memory services and processor construction
"""

import asyncio
from typing import Dict, List, Optional

import pytest

from vaultpress.config.settings import ExportSettings
from vaultpress.lib.executor import Executor, Processor
from vaultpress.lib.ruleset import Target, ruleSet_build
from vaultpress.models.context import ContextData, ExportContext
from vaultpress.models.node import Node, NodeKind, ROLE_TITLE
from vaultpress.models.services import ExportServices, SlugNotFoundError


class FakeSlugs:
    def __init__(self, slugs: Optional[Dict[str, str]] = None) -> None:
        self.slugs = slugs or {}

    async def slug_resolve(self, app, file_name):
        if file_name not in self.slugs:
            raise SlugNotFoundError(file_name)
        return self.slugs[file_name]


class FakeCode:
    async def fence_render(self, source, lang):
        return f"```{lang}\n{source}\n```\n"

    async def html_render(self, source, lang):
        return f'<pre data-lang="{lang}">{source}</pre>'


class FakeFormula:
    async def formula_render(self, source, block):
        return f"[{'block' if block else 'inline'}:{source}]"


class FakeAssets:
    """
    Records calls; per-path delays make earlier images finish last, so a
    test can tell document order from completion order.
    """

    def __init__(self, delays: Optional[Dict[str, float]] = None) -> None:
        self.delays = delays or {}
        self.copied: List[str] = []
        self.encoded: List[str] = []

    async def asset_copy(self, app, path, settings, slug):
        await asyncio.sleep(self.delays.get(path, 0))
        self.copied.append(path)

    async def asset_encode(self, app, path, settings, slug):
        await asyncio.sleep(self.delays.get(path, 0))
        self.encoded.append(path)
        return f"data:image/png;base64,{path}"


@pytest.fixture
def settings():
    return ExportSettings(
        export_path="",
        image_export_path="img",
        blog_path="posts",
        default_disp_name_zh_cn="index.zh-cn.md",
        default_disp_name_en="index.en.md",
        default_export_name_zh_cn="index.zh-cn",
        default_export_name_en="index.en",
    )


@pytest.fixture
def assets():
    return FakeAssets()


@pytest.fixture
def services(assets):
    return ExportServices(
        slugs=FakeSlugs({"Other Note": "other-note"}),
        code=FakeCode(),
        formula=FakeFormula(),
        assets=assets,
    )


@pytest.fixture
def make_processor(settings, services):
    """Factory: Processor bound to a fresh context for a target"""

    def factory(target: Target, root: Optional[Node] = None, **data) -> Processor:
        context = ExportContext(
            settings=settings,
            data=ContextData(**data),
            services=services,
            root=root,
        )
        return Processor(Executor(ruleSet_build(target)), context)

    return factory


def text(value: str) -> Node:
    return Node.text(value)


def paragraph(*children: Node, role: Optional[str] = None) -> Node:
    return Node(NodeKind.PARAGRAPH, children=list(children), role=role)


def callout(callout_type: Optional[str], title: Optional[str], *body: Node) -> Node:
    children = []
    if title is not None:
        children.append(paragraph(text(title), role=ROLE_TITLE))
    children.extend(body)
    attributes = {} if callout_type is None else {"calloutType": callout_type}
    return Node(NodeKind.CALLOUT, attributes=attributes, children=children)


def image(url: str, alt: str = "", title: str = "") -> Node:
    return Node(NodeKind.IMAGE, attributes={"url": url, "alt": alt, "title": title, "embed": True})
