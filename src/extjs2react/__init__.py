"""extjs2react - Ext JS class definitions to React modules

Source-to-source compiler: a whole-codebase class registry, table-driven
rewrite rules, an element-tree compiler and a template compiler.
"""

from extjs2react._version import __version__

# Pipeline
from extjs2react.codebase import Codebase, TranspileReport
from extjs2react.config import LibraryConfig, Settings, load_settings

# Core abstractions
from extjs2react.compiler import UnitCompiler
from extjs2react.elements.capabilities import CapabilityTable
from extjs2react.registry import Registry, load_unit
from extjs2react.rewrite import RewriteEngine
from extjs2react.template import TemplateCompiler

__all__ = [
    "__version__",
    # pipeline
    "Codebase",
    "TranspileReport",
    "Settings",
    "LibraryConfig",
    "load_settings",
    # core
    "CapabilityTable",
    "Registry",
    "RewriteEngine",
    "TemplateCompiler",
    "UnitCompiler",
    "load_unit",
]
