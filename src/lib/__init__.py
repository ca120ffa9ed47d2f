"""
Export engine for vaultpress

Rule sets, executor, serializers, default services and the exporter.
"""

from .log import LOG, state_connectToLogger, verbosity_connect
from .ruleset import RuleSet, Target, ruleSet_build
from .executor import Executor, Processor, TransformError
from .serializer import HtmlSerializer, SerializationError
from .stringifier import MarkdownStringifier
from .services import Vault, services_default
from .exporter import Exporter, ExportError, ExportResult

__all__ = [
    "LOG",
    "state_connectToLogger",
    "verbosity_connect",
    "RuleSet",
    "Target",
    "ruleSet_build",
    "Executor",
    "Processor",
    "TransformError",
    "HtmlSerializer",
    "SerializationError",
    "MarkdownStringifier",
    "Vault",
    "services_default",
    "Exporter",
    "ExportError",
    "ExportResult",
]
