"""
Per-run execution context

An ExportContext is created fresh for every export and discarded at the
end. It is never shared between concurrent exports, so rules mutate its
data bag without locking.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, TYPE_CHECKING

from .node import Node, NodeKind
from .services import ExportServices

if TYPE_CHECKING:
    from ..config.settings import ExportSettings
    from ..lib.executor import Processor


@dataclass
class ContextData:
    """
    Mutable side channel shared by the rules of one run

    Attributes:
        app: Application handle passed through to external services
             (the Vault for the default adapters)
        slug: Publish slug of the article being exported
        lang: Article language; "en" selects English settings pairs
        image_files: Asset paths referenced by the document, in document order
        extras: Free-form, rule-specific entries
    """
    app: Any = None
    slug: str = ""
    lang: str = ""
    image_files: List[str] = field(default_factory=list)
    extras: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ExportContext:
    """
    State of one export run

    Attributes:
        settings: Target configuration (frozen)
        data: Side-channel bag (see ContextData)
        services: External collaborators
        processor: Re-entrant capability handle; set by the Processor itself
        root: The caller's untouched document tree
        unmatched: Kinds met during the run that had no rule and were not
                   declared pass-through by the target
    """
    settings: 'ExportSettings'
    data: ContextData = field(default_factory=ContextData)
    services: ExportServices = field(default_factory=ExportServices)
    processor: Optional['Processor'] = None
    root: Optional[Node] = None
    unmatched: Set[NodeKind] = field(default_factory=set)

    def processor_get(self) -> 'Processor':
        """Processor for re-entrant calls; raises if the context is unbound"""
        if self.processor is None:
            raise RuntimeError("ExportContext has no processor bound")
        return self.processor
