"""
Exporter tests

Whole-document runs: asset order, locale selection, front matter handling
and concurrent exports.
"""

import asyncio

import pytest

from vaultpress.lib.exporter import ExportError, Exporter
from vaultpress.lib.ruleset import Target
from vaultpress.models.node import Node, NodeKind
from vaultpress.models.services import ExportServices

from conftest import FakeAssets, FakeCode, FakeFormula, FakeSlugs, callout, image, paragraph, text


def front(value):
    return Node(NodeKind.FRONT_MATTER, value=value)


def document(*children):
    return Node(NodeKind.DOCUMENT, children=list(children))


def three_images(frontmatter="slug: post"):
    """Images A, B, C at different nesting depths"""
    return document(
        front(frontmatter),
        paragraph(image("A.png")),
        callout("note", "Title", paragraph(image("B.png"))),
        Node(NodeKind.BLOCK_QUOTE, children=[paragraph(text("quoted "), image("C.png"))]),
    )


class TestAssetOrder:
    """Asset list follows document order, not completion order"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target", list(Target))
    async def test_order_a_b_c(self, settings, target):
        assets = FakeAssets(delays={"A.png": 0.03, "B.png": 0.01, "C.png": 0})
        services = ExportServices(slugs=FakeSlugs(), code=FakeCode(), formula=FakeFormula(), assets=assets)

        result = await Exporter(target, settings=settings, services=services).export(three_images())

        assert result.image_files == ["A.png", "B.png", "C.png"]
        assert (assets.copied or assets.encoded) == ["A.png", "B.png", "C.png"]


class TestHugoExport:
    """Markdown with shortcodes"""

    @pytest.mark.asyncio
    async def test_content(self, settings, services):
        doc = document(
            front("slug: hello\ntitle: Hello"),
            Node(NodeKind.HEADING, attributes={"level": 1}, children=[text("Hi")]),
            paragraph(text("Body "), image("a.png", alt="A")),
        )
        result = await Exporter("hugo-blowfish", settings=settings, services=services).export(doc)

        assert result.target is Target.HUGO_BLOWFISH
        assert result.content == "---\nslug: hello\ntitle: Hello\n---\n\n# Hi\n\nBody ![A](img/a.png)\n"
        assert result.slug == "hello"
        assert result.file_name == "index.zh-cn"
        assert result.unmatched_kinds == frozenset()

    @pytest.mark.asyncio
    async def test_katex_marker(self, settings, services):
        doc = document(front("slug: m"), paragraph(Node(NodeKind.MATH_SPAN, value="x")))
        result = await Exporter(Target.HUGO_BLOWFISH, settings=settings, services=services).export(doc)
        assert result.content == "---\nslug: m\n---\n{{< katex >}}\n\n\\(x\\)\n"

    @pytest.mark.asyncio
    async def test_input_tree_untouched(self, settings, services):
        doc = three_images()
        await Exporter(Target.HUGO_BLOWFISH, settings=settings, services=services).export(doc)
        assert doc.children[1].children[0].attr("url") == "A.png"
        assert doc.children[2].kind is NodeKind.CALLOUT


class TestWechatExport:
    """Single HTML string"""

    @pytest.mark.asyncio
    async def test_content(self, settings, services):
        doc = document(front("slug: w"), paragraph(text("a < b")))
        result = await Exporter(Target.WECHAT_POST, settings=settings, services=services).export(doc)
        assert result.content == "<p>a &lt; b</p>"
        assert result.target is Target.WECHAT_POST


class TestLocale:
    """lang selects the _en or _zh_cn settings pair"""

    @pytest.mark.asyncio
    async def test_english_from_front_matter(self, settings, services):
        doc = document(front("slug: p\nlanguage: en"), Node(NodeKind.EMBED, value="Other"))
        result = await Exporter(Target.HUGO_BLOWFISH, settings=settings, services=services).export(doc)

        assert result.lang == "en"
        assert result.file_name == "index.en"
        assert '{{< mdimporter url="content/posts/p/index.en.md" >}}' in result.content

    @pytest.mark.asyncio
    @pytest.mark.parametrize("lang", ["zh-cn", None])
    async def test_chinese_or_unset(self, settings, services, lang):
        doc = document(front("slug: p"), Node(NodeKind.EMBED, value="Other"))
        result = await Exporter(Target.HUGO_BLOWFISH, settings=settings, services=services).export(doc, lang=lang)

        assert result.file_name == "index.zh-cn"
        assert '{{< mdimporter url="content/posts/p/index.zh-cn.md" >}}' in result.content


class TestFrontMatter:
    """Slug resolution and failures"""

    @pytest.mark.asyncio
    async def test_missing_slug(self, settings, services):
        with pytest.raises(ExportError, match="slug"):
            await Exporter(Target.HUGO_BLOWFISH, settings=settings, services=services).export(
                document(paragraph(text("x")))
            )

    @pytest.mark.asyncio
    async def test_slug_argument_wins(self, settings, services):
        doc = document(front("slug: from-file"), paragraph(text("x")))
        result = await Exporter(Target.HUGO_BLOWFISH, settings=settings, services=services).export(doc, slug="given")
        assert result.slug == "given"

    @pytest.mark.asyncio
    async def test_bad_yaml(self, settings, services):
        doc = document(front("slug: [unclosed"), paragraph(text("x")))
        with pytest.raises(ExportError):
            await Exporter(Target.HUGO_BLOWFISH, settings=settings, services=services).export(doc)

    def test_unknown_target(self, settings, services):
        with pytest.raises(ValueError):
            Exporter("medium", settings=settings, services=services)


class TestConcurrency:
    """Concurrent exports each own their context"""

    @pytest.mark.asyncio
    async def test_gather(self, settings, services):
        exporter = Exporter(Target.WECHAT_POST, settings=settings, services=services)
        first = document(front("slug: one"), paragraph(image("1a.png"), image("1b.png")))
        second = document(front("slug: two"), paragraph(image("2a.png")))

        one, two = await asyncio.gather(exporter.export(first), exporter.export(second))

        assert one.image_files == ["1a.png", "1b.png"]
        assert two.image_files == ["2a.png"]
        assert one.slug == "one" and two.slug == "two"

    def test_export_sync(self, settings, services):
        doc = document(front("slug: s"), paragraph(text("x")))
        result = Exporter(Target.WECHAT_POST, settings=settings, services=services).export_sync(doc)
        assert result.content == "<p>x</p>"


class TestDeepDocument:
    """Hundreds of nesting levels survive transform and final rendering"""

    EXPECTED = {
        Target.HUGO_BLOWFISH: "> " * 300 + "x" + "\n" * 300,
        Target.WECHAT_POST: "<blockquote>" * 300 + "x" + "</blockquote>" * 300,
    }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target", list(Target))
    async def test_nested_blockquotes(self, settings, services, target):
        node = text("x")
        for _ in range(300):
            node = Node(NodeKind.BLOCK_QUOTE, children=[node])

        result = await Exporter(target, settings=settings, services=services).export(document(node), slug="s")

        assert result.content == self.EXPECTED[target]
