"""
Hugo Blowfish rule set

Rules for the shortcode target. Each rule returns nodes carrying literal
Hugo shortcode text; the MarkdownStringifier writes the transformed tree
back out as the article body.

Container kinds descend into their children so that callouts, images and
links nested anywhere in the document are converted. Leaves that already
read correctly as Markdown are declared pass-through.
"""

import re
from typing import Any, Dict

from ..models.context import ExportContext
from ..models.node import Node, NodeKind, ROLE_TITLE, tree_walk
from ..models.rule import RuleBuilder
from .ruleset import RuleSet, Target


# Canonical callout type for every alias Obsidian accepts
CALLOUT_ALIASES: Dict[str, str] = {
    'note': 'note',
    'info': 'info',
    'todo': 'todo',
    'tip': 'tip', 'hint': 'tip', 'important': 'tip',
    'success': 'success', 'check': 'success', 'done': 'success',
    'warning': 'warning', 'caution': 'warning', 'attention': 'warning',
    'question': 'question', 'help': 'question', 'faq': 'question',
    'danger': 'danger', 'error': 'danger',
    'example': 'example',
}

ALERT_ATTRIBUTES: Dict[str, str] = {
    'note': 'icon="pencil" cardColor="#1E3A8A" textColor="#E0E7FF"',
    'info': 'icon="circle-info" cardColor="#b0c4de" textColor="#333333"',
    'todo': 'icon="square-check" iconColor="#4682B4" cardColor="#e0ffff" textColor="#333333"',
    'tip': 'icon="lightbulb" cardColor="#fff5b7" textColor="#333333"',
    'success': 'icon="check" cardColor="#32CD32" textColor="#fff" iconColor="#ffffff"',
    'warning': 'icon="triangle-exclamation" cardColor="#ffcc00" textColor="#333333" iconColor="#8B6914"',
    'question': 'icon="circle-question" cardColor="#ffeb3b" textColor="#333333" iconColor="#3b3b3b"',
    'danger': 'icon="fire" cardColor="#e63946" iconColor="#ffffff" textColor="#ffffff"',
    'example': 'icon="list" cardColor="#d8bfd8" iconColor="#8B008B" textColor="#333333"',
}

# Kinds that read correctly as Markdown once their parents are converted
HUGO_PASSTHROUGH = (
    NodeKind.TEXT,
    NodeKind.INLINE_CODE,
    NodeKind.HTML_BLOCK,
    NodeKind.HTML_INLINE,
    NodeKind.HTML_COMMENT,
    NodeKind.HORIZONTAL_RULE,
    NodeKind.AUTO_LINK,
    NodeKind.ESCAPED_CHAR,
    NodeKind.FOOTNOTE_REF,
)

# Kinds whose only job is to hold converted children
HUGO_CONTAINERS = (
    NodeKind.DOCUMENT,
    NodeKind.PARAGRAPH,
    NodeKind.HEADING,
    NodeKind.LIST,
    NodeKind.LIST_ITEM,
    NodeKind.BLOCK_QUOTE,
    NodeKind.STRONG,
    NodeKind.EMPHASIS,
    NodeKind.STRONG_EMPHASIS,
    NodeKind.HIGHLIGHT,
    NodeKind.STRIKE,
    NodeKind.LINK,
    NodeKind.TABLE,
    NodeKind.TABLE_HEADER,
    NodeKind.TABLE_ROW,
    NodeKind.TABLE_CELL,
    NodeKind.FOOTNOTE_DEF,
)

MATH_KINDS = (NodeKind.MATH_BLOCK, NodeKind.MATH_SPAN)


def calloutType_normalize(callout_type: Any) -> str:
    """
    Canonical callout type, case-insensitive

    Unknown or missing types normalize to 'note'.

    Example:
        >>> calloutType_normalize('Caution')
        'warning'
    """
    return CALLOUT_ALIASES.get(str(callout_type or '').strip().lower(), 'note')


def calloutAttributes_get(callout_type: Any) -> str:
    """Attribute string of the Blowfish alert shortcode for a callout type"""
    return ALERT_ATTRIBUTES[calloutType_normalize(callout_type)]


ASCII_UPPER = re.compile(r'[A-Z]')
ANCHOR_STRIP = re.compile(r'[^\w\-\u4e00-\u9fa5]', re.ASCII)


def heading_slugify(heading: str) -> str:
    """
    Anchor form of a heading as Hugo generates it

    A-Z lower-cased, whitespace runs become '-', then everything but ASCII
    word characters, '-' and CJK unified ideographs is removed. Accented
    letters are dropped, not folded.

    Example:
        >>> heading_slugify('Setup & Usage')
        'setup--usage'
        >>> heading_slugify('Café Ünïcode')
        'caf-ncode'
    """
    lowered = ASCII_UPPER.sub(lambda match: match.group(0).lower(), heading)
    return ANCHOR_STRIP.sub('', re.sub(r'\s+', '-', lowered))


def formula_collapse(value: str | None) -> str:
    """Formula source on one line, surrounding whitespace removed"""
    return re.sub(r'\s+', ' ', (value or '').strip())


class HugoBlowfishRuleSet(RuleSet):
    """
    Rule set of the Hugo Blowfish target

    Registers one rule per converted kind; see HUGO_PASSTHROUGH for the
    kinds deliberately left untouched.
    """

    def __init__(self) -> None:
        super().__init__(Target.HUGO_BLOWFISH.value, passthrough=HUGO_PASSTHROUGH)
        self.structureRules_register()
        self.calloutRules_register()
        self.imageRules_register()
        self.linkRules_register()
        self.mathRules_register()
        self.codeRules_register()

    def structureRules_register(self) -> None:
        """Register container rules that convert children in document order"""

        async def descend(node: Node, context: ExportContext) -> Node:
            return await context.processor_get().descend(node)

        for kind in HUGO_CONTAINERS:
            self.register(
                RuleBuilder(f'{kind.value.lower()}-descend')
                .description_set(f'Convert the children of a {kind.value} in document order')
                .kind_match(kind)
                .transform_set(descend)
                .build()
            )

    def calloutRules_register(self) -> None:
        """Register the callout to alert shortcode rule"""

        async def callout_transform(node: Node, context: ExportContext) -> Node:
            """
            Wrap the callout body in an alert shortcode

            The title child is dropped; Blowfish alerts have no title slot.
            """
            attributes = calloutAttributes_get(node.attr('calloutType'))
            body = await context.processor_get().children_execute(
                node.children_withoutRole(ROLE_TITLE)
            )
            return Node.fragment([
                Node.text(f"\n{{{{< alert {attributes} >}}}}\n"),
                *body,
                Node.text("{{< /alert >}}\n"),
            ])

        self.register(
            RuleBuilder('callout')
            .description_set('Convert callouts to Blowfish alert shortcodes')
            .kind_match(NodeKind.CALLOUT)
            .transform_set(callout_transform)
            .build()
        )

    def imageRules_register(self) -> None:
        """Register the image path rewriting rule"""

        async def image_transform(node: Node, context: ExportContext) -> Node:
            url = node.attr('url', '')
            context.data.image_files.append(url)
            await context.services.require('assets').asset_copy(
                context.data.app, url, context.settings, context.data.slug
            )
            image = node.children_replace(node.children)
            image.attributes['url'] = f"{context.settings.image_export_path}/{url}"
            return image

        self.register(
            RuleBuilder('image')
            .description_set('Copy images next to the article and point to the copy')
            .kind_match(NodeKind.IMAGE)
            .transform_set(image_transform)
            .build()
        )

    def linkRules_register(self) -> None:
        """Register wiki link and embed rules"""

        async def wikiLink_transform(node: Node, context: ExportContext) -> Node:
            ref = node.attributes_typed()
            anchor = heading_slugify(ref.heading)
            text = ref.alias or ref.heading or ref.file

            if ref.linkType in ('external-heading', 'article'):
                slug = await context.services.require('slugs').slug_resolve(context.data.app, ref.file)
                target = f"/{context.settings.blog_path}/{slug}/{'#' + anchor if anchor else ''}"
                return Node.text(f'[{text}]({{{{< ref "{target}" >}}}})')
            if ref.linkType == 'internal-heading':
                return Node.text(f'[{text}]({{{{< relref "#{anchor}" >}}}})')
            return Node.text(text)

        def embed_transform(node: Node, context: ExportContext) -> Node:
            disp_name = context.settings.dispName_forLang(context.data.lang)
            url = f"content/{context.settings.blog_path}/{context.data.slug}/{disp_name}"
            return Node.text(f'{{{{< mdimporter url="{url}" >}}}}')

        self.register(
            RuleBuilder('wiki-link')
            .description_set('Convert wiki links to ref/relref shortcodes')
            .kind_match(NodeKind.WIKI_LINK)
            .transform_set(wikiLink_transform)
            .build()
        )
        self.register(
            RuleBuilder('embed')
            .description_set('Convert embeds to mdimporter shortcodes')
            .kind_match(NodeKind.EMBED)
            .transform_set(embed_transform)
            .build()
        )

    def mathRules_register(self) -> None:
        """Register formula rules and the KaTeX front matter marker"""

        def frontMatter_transform(node: Node, context: ExportContext) -> Node:
            # Must inspect the untouched tree: math nodes are gone once converted
            root = context.root if context.root is not None else node
            if any(n.kind in MATH_KINDS for n in tree_walk(root)):
                return Node.text(f"---\n{node.value or ''}\n---\n{{{{< katex >}}}}\n")
            return node

        def mathBlock_transform(node: Node, context: ExportContext) -> Node:
            return Node.text(f"\n$$\n{formula_collapse(node.value)}\n$$\n")

        def mathSpan_transform(node: Node, context: ExportContext) -> Node:
            return Node.text(f"\\({formula_collapse(node.value)}\\)")

        math_specs = [
            ('katex-frontmatter', 'Add the katex shortcode after front matter when the document has math',
             NodeKind.FRONT_MATTER, frontMatter_transform),
            ('math-block', 'Convert block formulas to $$ delimited text',
             NodeKind.MATH_BLOCK, mathBlock_transform),
            ('math-inline', 'Convert inline formulas to \\( \\) delimited text',
             NodeKind.MATH_SPAN, mathSpan_transform),
        ]

        for name, desc, kind, transform in math_specs:
            self.register(
                RuleBuilder(name)
                .description_set(desc)
                .kind_match(kind)
                .transform_set(transform)
                .build()
            )

    def codeRules_register(self) -> None:
        """Register the code block rule (mermaid shortcode or fenced code)"""

        async def code_transform(node: Node, context: ExportContext) -> Node:
            lang = node.attr('lang', '')
            source = node.value or ''
            if lang == 'mermaid':
                return Node.text(f"{{{{< mermaid >}}}}\n{source}\n{{{{< /mermaid >}}}}\n")
            return Node.text(await context.services.require('code').fence_render(source, lang))

        self.register(
            RuleBuilder('code')
            .description_set('Convert mermaid blocks to shortcodes and render other code as fences')
            .kind_match(NodeKind.CODE_BLOCK)
            .transform_set(code_transform)
            .build()
        )
