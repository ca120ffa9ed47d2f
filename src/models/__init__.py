"""
Models package for vaultpress

Contains the document node model, rules, run context, service contracts
and the command line state.
"""

from .node import Node, NodeKind, ROLE_TITLE, fragments_flatten, tree_flatten, node_fromDict, node_toDict
from .rule import Rule, RuleBuilder, BuildError
from .services import ExportServices, SlugNotFoundError, AssetNotFoundError
from .context import ExportContext, ContextData
from .state import ProgramState, pipeline

__all__ = [
    "Node",
    "NodeKind",
    "ROLE_TITLE",
    "fragments_flatten",
    "tree_flatten",
    "node_fromDict",
    "node_toDict",
    "Rule",
    "RuleBuilder",
    "BuildError",
    "ExportServices",
    "SlugNotFoundError",
    "AssetNotFoundError",
    "ExportContext",
    "ContextData",
    "ProgramState",
    "pipeline",
]
