"""
Exporter for vaultpress documents

Runs one document through a target's rule set and renders the result:
Markdown text with Hugo shortcodes, or a single WeChat-ready HTML string.
Every call builds its own ExportContext, so exports may run concurrently.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional

import yaml

from ..config.settings import ExportSettings, appsettings
from ..models.context import ContextData, ExportContext
from ..models.node import Node, NodeKind
from ..models.services import ExportServices
from .executor import Executor, Processor
from .log import LOG
from .ruleset import Target, ruleSet_build
from .services import services_default
from .stringifier import MarkdownStringifier


class ExportError(Exception):
    """Raised when a document cannot be exported (bad front matter, no slug)"""
    pass


@dataclass
class ExportResult:
    """
    Outcome of one export

    Attributes:
        target: Target the document was exported for
        content: Final article text (Markdown or HTML)
        image_files: Asset paths referenced by the document, in document order
        slug: Publish slug used for the run
        lang: Article language used for the run
        file_name: Locale-selected export file name
        unmatched_kinds: Kinds that had no rule and were not declared pass-through
    """
    target: Target
    content: str
    image_files: List[str] = field(default_factory=list)
    slug: str = ""
    lang: str = ""
    file_name: str = ""
    unmatched_kinds: FrozenSet[NodeKind] = frozenset()


def frontmatter_get(root: Node) -> Dict[str, Any]:
    """
    Front matter mapping of a document, or an empty dict

    Raises:
        ExportError: Front matter is not valid YAML
    """
    candidates = [root] + list(root.children)
    for node in candidates:
        if node.kind is NodeKind.FRONT_MATTER:
            try:
                data = yaml.safe_load(node.value or '') or {}
            except yaml.YAMLError as e:
                raise ExportError(f"Front matter is not valid YAML: {e}") from e
            return data if isinstance(data, dict) else {}
    return {}


class Exporter:
    """
    Export documents for one target

    Args:
        target: Target enum or its string value ('hugo-blowfish', 'wechat-post')
        settings: Export settings (defaults to the appsettings singleton)
        services: External services (defaults to the vault adapters)

    Example:
        exporter = Exporter('hugo-blowfish')
        result = await exporter.export(document, app=Vault('notes'))
        print(result.content)
    """

    def __init__(
        self,
        target: Target | str,
        settings: Optional[ExportSettings] = None,
        services: Optional[ExportServices] = None,
    ) -> None:
        self.target = Target(target)
        self.settings = settings or appsettings
        self.services = services or services_default(self.settings)
        self.executor = Executor(ruleSet_build(self.target))

    async def export(
        self,
        root: Node,
        slug: Optional[str] = None,
        lang: Optional[str] = None,
        app: Any = None,
    ) -> ExportResult:
        """
        Convert one document

        Args:
            root: Document tree; never modified
            slug: Publish slug (default: front matter 'slug')
            lang: Article language (default: front matter 'language')
            app: Application handle passed to services (a Vault for the
                 default adapters)

        Returns:
            ExportResult with the rendered content and collected assets

        Raises:
            ExportError: No slug given and none in the front matter
            TransformError: A rule failed; nothing is rendered
        """
        frontmatter = frontmatter_get(root)
        slug = slug or str(frontmatter.get('slug') or '')
        lang = lang or str(frontmatter.get('language') or '')
        if not slug:
            raise ExportError("Document has no slug; add 'slug' to its front matter or pass one")

        LOG(f"Exporting '{slug}' for {self.target.value} (lang: {lang or 'default'})", level=1)

        context = ExportContext(
            settings=self.settings,
            data=ContextData(app=app, slug=slug, lang=lang),
            services=self.services,
            root=root,
        )
        processor = Processor(self.executor, context)
        converted = await processor.run(root)

        if self.target is Target.HUGO_BLOWFISH:
            content = MarkdownStringifier().node_stringify(converted)
        else:
            content = processor.serialize(converted)

        title = str(frontmatter.get('title') or slug)
        result = ExportResult(
            target=self.target,
            content=content,
            image_files=list(context.data.image_files),
            slug=slug,
            lang=lang,
            file_name=self.settings.exportName_forLang(lang, title),
            unmatched_kinds=frozenset(context.unmatched),
        )
        LOG(f"Exported '{slug}': {len(result.image_files)} asset(s), file {result.file_name}", level=2)
        return result

    def export_sync(self, root: Node, **kwargs: Any) -> ExportResult:
        """Blocking wrapper around export() for callers without an event loop"""
        return asyncio.run(self.export(root, **kwargs))
