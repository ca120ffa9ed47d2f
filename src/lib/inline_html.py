"""
WeChat post rule set

Rules for the inline-HTML target. Every rule returns HtmlBlock or
HtmlInline nodes; a rule whose node has children executes them first and
runs the result through the HtmlSerializer, so each replaced position
holds exactly one HTML string. The Document rule collapses the whole
article into a single HtmlBlock.

Text is HTML-escaped here, once. The serializer never escapes.
"""

from html import escape
from typing import Awaitable, Callable, Dict

from ..models.context import ExportContext
from ..models.node import Node, NodeKind, ROLE_TITLE
from ..models.rule import RuleBuilder
from .ruleset import RuleSet, Target
from .shortcode import calloutType_normalize


HtmlTransform = Callable[[Node, ExportContext], Awaitable[Node]]

WECHAT_PASSTHROUGH = (
    NodeKind.HTML_BLOCK,
    NodeKind.HTML_INLINE,
)

_SVG_OPEN = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" '
    'fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" '
    'stroke-linejoin="round" class="lucide lucide-{name}-icon lucide-{name}">'
)

_ICON_PATHS: Dict[str, str] = {
    'pencil-line': (
        '<path d="M13 21h8"/><path d="m15 5 4 4"/>'
        '<path d="M21.174 6.812a1 1 0 0 0-3.986-3.987L3.842 16.174a2 2 0 0 0-.5.83l-1.321 '
        '4.352a.5.5 0 0 0 .623.622l4.353-1.32a2 2 0 0 0 .83-.497z"/>'
    ),
    'info': '<circle cx="12" cy="12" r="10"/><path d="M12 16v-4"/><path d="M12 8h.01"/>',
    'circle-check-big': '<path d="M21.801 10A10 10 0 1 1 17 3.335"/><path d="m9 11 3 3L22 4"/>',
    'flame': (
        '<path d="M8.5 14.5A2.5 2.5 0 0 0 11 12c0-1.38-.5-2-1-3-1.072-2.143-.224-4.054 '
        '2-6 .5 2.5 2 4.9 4 6.5 2 1.6 3 3.5 3 5.5a7 7 0 1 1-14 0c0-1.153.433-2.294 '
        '1-3a2.5 2.5 0 0 0 2.5 2.5z"/>'
    ),
    'circle-question-mark': (
        '<circle cx="12" cy="12" r="10"/><path d="M9.09 9a3 3 0 0 1 5.83 1c0 2-3 3-3 3"/>'
        '<path d="M12 17h.01"/>'
    ),
    'list': (
        '<path d="M3 12h.01"/><path d="M3 18h.01"/><path d="M3 6h.01"/>'
        '<path d="M8 12h13"/><path d="M8 18h13"/><path d="M8 6h13"/>'
    ),
}

# Lucide icon per canonical callout type
CALLOUT_ICONS: Dict[str, str] = {
    'note': 'pencil-line',
    'info': 'info',
    'todo': 'circle-check-big',
    'tip': 'flame',
    'success': 'info',
    'warning': 'info',
    'question': 'circle-question-mark',
    'danger': 'info',
    'example': 'list',
}


def calloutIcon_get(callout_type: str) -> str:
    """Inline SVG of the icon shown in a callout's title bar"""
    name = CALLOUT_ICONS[calloutType_normalize(callout_type)]
    return _SVG_OPEN.format(name=name) + _ICON_PATHS[name] + '</svg>'


def make_html_wrapper(tag: str, block: bool = False) -> HtmlTransform:
    """
    Factory for rules that wrap converted children in one HTML tag

    Args:
        tag: Element name
        block: Produce an HtmlBlock instead of an HtmlInline
    """
    kind = NodeKind.HTML_BLOCK if block else NodeKind.HTML_INLINE

    async def handler(node: Node, context: ExportContext) -> Node:
        inner = await children_toHtml(node, context)
        return Node(kind=kind, value=f'<{tag}>{inner}</{tag}>')
    return handler


async def children_toHtml(node: Node, context: ExportContext) -> str:
    """Execute a node's children in order and serialize the result"""
    processor = context.processor_get()
    return processor.serialize(await processor.children_execute(node.children))


def html_block(value: str) -> Node:
    return Node(kind=NodeKind.HTML_BLOCK, value=value)


def html_inline(value: str) -> Node:
    return Node(kind=NodeKind.HTML_INLINE, value=value)


class WechatPostRuleSet(RuleSet):
    """
    Rule set of the WeChat post target

    Every kind of the node model except raw HTML has a rule here, so a
    converted document serializes without a SerializationError.
    """

    def __init__(self) -> None:
        super().__init__(Target.WECHAT_POST.value, passthrough=WECHAT_PASSTHROUGH)
        self.documentRules_register()
        self.formattingRules_register()
        self.blockRules_register()
        self.tableRules_register()
        self.textRules_register()
        self.calloutRules_register()
        self.codeRules_register()
        self.imageRules_register()
        self.mathRules_register()
        self.linkRules_register()

    def rule_add(self, name: str, description: str, kind: NodeKind, transform: Callable) -> None:
        self.register(
            RuleBuilder(name)
            .description_set(description)
            .kind_match(kind)
            .transform_set(transform)
            .build()
        )

    def documentRules_register(self) -> None:
        """Register whole-document rules"""

        async def document_transform(node: Node, context: ExportContext) -> Node:
            return html_block(await children_toHtml(node, context))

        def drop(node: Node, context: ExportContext) -> Node:
            return Node.fragment([])

        self.rule_add('document', 'Collapse the article into one HTML block',
                      NodeKind.DOCUMENT, document_transform)
        self.rule_add('front-matter', 'Drop front matter from the post',
                      NodeKind.FRONT_MATTER, drop)
        self.rule_add('html-comment', 'Drop HTML comments from the post',
                      NodeKind.HTML_COMMENT, drop)

    def formattingRules_register(self) -> None:
        """Register inline formatting rules"""

        formatting_specs = [
            ('strong', NodeKind.STRONG, 'strong', 'Bold text'),
            ('emphasis', NodeKind.EMPHASIS, 'em', 'Italic text'),
            ('highlight', NodeKind.HIGHLIGHT, 'mark', 'Highlighted text'),
            ('strike', NodeKind.STRIKE, 'del', 'Struck-through text'),
        ]
        for name, kind, tag, desc in formatting_specs:
            self.rule_add(name, f'{desc} as <{tag}>', kind, make_html_wrapper(tag))

        async def strongEmphasis_transform(node: Node, context: ExportContext) -> Node:
            return html_inline(f'<strong><em>{await children_toHtml(node, context)}</em></strong>')

        self.rule_add('strong-emphasis', 'Bold italic text as <strong><em>',
                      NodeKind.STRONG_EMPHASIS, strongEmphasis_transform)

    def blockRules_register(self) -> None:
        """Register paragraph, heading, quote and list rules"""

        self.rule_add('paragraph', 'Paragraphs as <p>',
                      NodeKind.PARAGRAPH, make_html_wrapper('p', block=True))
        self.rule_add('blockquote', 'Quotes as <blockquote>',
                      NodeKind.BLOCK_QUOTE, make_html_wrapper('blockquote', block=True))

        async def heading_transform(node: Node, context: ExportContext) -> Node:
            level = min(max(int(node.attr('level', 1)), 1), 6)
            return html_block(f'<h{level}>{await children_toHtml(node, context)}</h{level}>')

        async def list_transform(node: Node, context: ExportContext) -> Node:
            tag = 'ol' if node.attr('ordered', False) else 'ul'
            return html_block(f'<{tag}>{await children_toHtml(node, context)}</{tag}>')

        async def listItem_transform(node: Node, context: ExportContext) -> Node:
            task = node.attributes_typed().task
            marker = '' if task is None else ('☑ ' if task else '☐ ')
            return html_block(f'<li>{marker}{await children_toHtml(node, context)}</li>')

        def horizontalRule_transform(node: Node, context: ExportContext) -> Node:
            return html_block('<hr>')

        async def footnoteDef_transform(node: Node, context: ExportContext) -> Node:
            fid = escape(str(node.attr('id', '')))
            inner = await children_toHtml(node, context)
            return html_block(f'<section class="footnote" id="fn-{fid}"><sup>[{fid}]</sup> {inner}</section>')

        self.rule_add('heading', 'Headings as <h1> to <h6>', NodeKind.HEADING, heading_transform)
        self.rule_add('list', 'Lists as <ul> or <ol>', NodeKind.LIST, list_transform)
        self.rule_add('list-item', 'List items as <li>', NodeKind.LIST_ITEM, listItem_transform)
        self.rule_add('horizontal-rule', 'Thematic breaks as <hr>',
                      NodeKind.HORIZONTAL_RULE, horizontalRule_transform)
        self.rule_add('footnote-def', 'Footnote definitions as footnote sections',
                      NodeKind.FOOTNOTE_DEF, footnoteDef_transform)

    def tableRules_register(self) -> None:
        """
        Register table rules

        The Table rule copies its column alignment onto each cell (and marks
        header cells) before executing header and rows, so the cell rule can
        emit <th> or <td> with the right style.
        """

        def cells_annotate(row: Node, align: tuple, header: bool) -> Node:
            cells = []
            for i, cell in enumerate(row.children):
                cell = cell.children_replace(cell.children)
                cell.attributes['header'] = header
                cell.attributes['align'] = align[i] if i < len(align) else None
                cells.append(cell)
            return row.children_replace(cells)

        async def table_transform(node: Node, context: ExportContext) -> Node:
            processor = context.processor_get()
            align = node.attributes_typed().align
            head, body = [], []
            for child in node.children:
                if child.kind is NodeKind.TABLE_HEADER:
                    head.append(await processor.execute(cells_annotate(child, align, True)))
                elif child.kind is NodeKind.TABLE_ROW:
                    body.append(await processor.execute(cells_annotate(child, align, False)))
            return html_block(
                f'<table><thead>{processor.serialize(head)}</thead>'
                f'<tbody>{processor.serialize(body)}</tbody></table>'
            )

        async def tableCell_transform(node: Node, context: ExportContext) -> Node:
            tag = 'th' if node.attr('header', False) else 'td'
            align = node.attr('align')
            style = f' style="text-align:{escape(align)}"' if align else ''
            return html_block(f'<{tag}{style}>{await children_toHtml(node, context)}</{tag}>')

        self.rule_add('table', 'Tables as <table> with <thead> and <tbody>', NodeKind.TABLE, table_transform)
        self.rule_add('table-header', 'Header rows as <tr>',
                      NodeKind.TABLE_HEADER, make_html_wrapper('tr', block=True))
        self.rule_add('table-row', 'Body rows as <tr>',
                      NodeKind.TABLE_ROW, make_html_wrapper('tr', block=True))
        self.rule_add('table-cell', 'Cells as <th> or <td>', NodeKind.TABLE_CELL, tableCell_transform)

    def textRules_register(self) -> None:
        """Register leaf text rules; all escaping of document text happens here"""

        def text_transform(node: Node, context: ExportContext) -> Node:
            return html_inline(escape(node.value or '', quote=False))

        def inlineCode_transform(node: Node, context: ExportContext) -> Node:
            return html_inline(f'<span class="inline-code">{escape((node.value or "").strip())}</span>')

        async def link_transform(node: Node, context: ExportContext) -> Node:
            link = node.attributes_typed()
            if node.children:
                inner = await children_toHtml(node, context)
            else:
                inner = escape(link.label or link.url, quote=False)
            title = f' title="{escape(link.title)}"' if link.title else ''
            return html_inline(f'<a href="{escape(link.url)}"{title}>{inner}</a>')

        def autoLink_transform(node: Node, context: ExportContext) -> Node:
            url = node.attr('url', node.value or '')
            return html_inline(f'<a href="{escape(url)}">{escape(url, quote=False)}</a>')

        def footnoteRef_transform(node: Node, context: ExportContext) -> Node:
            fid = escape(str(node.attr('id', '')))
            return html_inline(f'<sup class="footnote-ref">[{fid}]</sup>')

        self.rule_add('text', 'Escape text for HTML', NodeKind.TEXT, text_transform)
        self.rule_add('escaped-char', 'Escape literal characters for HTML', NodeKind.ESCAPED_CHAR, text_transform)
        self.rule_add('inline-code', 'Inline code as a styled span', NodeKind.INLINE_CODE, inlineCode_transform)
        self.rule_add('link', 'Links as <a>', NodeKind.LINK, link_transform)
        self.rule_add('auto-link', 'Bare URLs as <a>', NodeKind.AUTO_LINK, autoLink_transform)
        self.rule_add('footnote-ref', 'Footnote references as <sup>', NodeKind.FOOTNOTE_REF, footnoteRef_transform)

    def calloutRules_register(self) -> None:
        """Register the callout to styled blockquote rule"""

        async def callout_transform(node: Node, context: ExportContext) -> Node:
            """
            Render a callout as one blockquote

            Body children are executed and serialized one after another so
            images inside the body are recorded in document order.
            """
            processor = context.processor_get()
            callout_type = calloutType_normalize(node.attr('calloutType'))

            title = ''
            title_node = node.child_withRole(ROLE_TITLE)
            if title_node is not None:
                title = processor.serialize(await processor.children_execute(title_node.children))

            body = []
            for child in node.children_withoutRole(ROLE_TITLE):
                body.append(processor.serialize(await processor.execute(child)))

            return html_block(
                f'<blockquote class="callout is-{callout_type}">'
                f'<p class="callout-title"><span class="callout-icon" aria-hidden="true">'
                f'{calloutIcon_get(callout_type)}</span>{title}</p>'
                f'<div class="callout-body">{"".join(body)}</div></blockquote>'
            )

        self.rule_add('callout', 'Callouts as styled blockquotes with a title bar',
                      NodeKind.CALLOUT, callout_transform)

    def codeRules_register(self) -> None:
        """Register the code block rule (mermaid placeholder or highlighted HTML)"""

        async def code_transform(node: Node, context: ExportContext) -> Node:
            lang = node.attr('lang', '')
            source = node.value or ''
            if lang == 'mermaid':
                return html_block(
                    '<div class="mermaid-placeholder"><pre><code class="language-mermaid">'
                    f'{escape(source, quote=False)}</code></pre></div>'
                )
            return html_block(await context.services.require('code').html_render(source, lang))

        self.rule_add('code', 'Code blocks as highlighted HTML; mermaid as a placeholder',
                      NodeKind.CODE_BLOCK, code_transform)

    def imageRules_register(self) -> None:
        """Register the image inlining rule"""

        async def image_transform(node: Node, context: ExportContext) -> Node:
            image = node.attributes_typed()
            context.data.image_files.append(image.url)
            src = await context.services.require('assets').asset_encode(
                context.data.app, image.url, context.settings, context.data.slug
            )
            img = f'<img src="{escape(src)}" alt="{escape(image.alt)}">'
            if image.title:
                return html_block(f'<figure>{img}<figcaption>{escape(image.title, quote=False)}</figcaption></figure>')
            return html_inline(img)

        self.rule_add('image', 'Images inlined as data URIs', NodeKind.IMAGE, image_transform)

    def mathRules_register(self) -> None:
        """Register formula rules"""

        async def mathBlock_transform(node: Node, context: ExportContext) -> Node:
            markup = await context.services.require('formula').formula_render((node.value or '').strip(), True)
            return html_block(f'<section class="math-block">{markup}</section>')

        async def mathSpan_transform(node: Node, context: ExportContext) -> Node:
            markup = await context.services.require('formula').formula_render((node.value or '').strip(), False)
            return html_inline(f'<span class="math-inline">{markup}</span>')

        self.rule_add('math-block', 'Block formulas via the formula renderer',
                      NodeKind.MATH_BLOCK, mathBlock_transform)
        self.rule_add('math-inline', 'Inline formulas via the formula renderer',
                      NodeKind.MATH_SPAN, mathSpan_transform)

    def linkRules_register(self) -> None:
        """Register wiki link and embed rules"""

        def wikiLink_transform(node: Node, context: ExportContext) -> Node:
            ref = node.attributes_typed()
            text = ref.alias or ref.heading or ref.file
            return html_inline(
                f'<a class="wikilink" data-target="{escape(ref.file)}">{escape(text, quote=False)}</a>'
            )

        def embed_transform(node: Node, context: ExportContext) -> Node:
            value = escape(node.value or '')
            return html_block(
                f'<figure class="embed" data-src="{value}"><figcaption>内嵌资源占位（{value}）</figcaption></figure>'
            )

        self.rule_add('wiki-link', 'Wiki links as <a class="wikilink">', NodeKind.WIKI_LINK, wikiLink_transform)
        self.rule_add('embed', 'Embeds as placeholder figures', NodeKind.EMBED, embed_transform)
