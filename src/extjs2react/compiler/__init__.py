"""Unit compilation: accessors, class emission and import plans."""

from extjs2react.compiler.accessors import AccessorDescriptor, synthesize_accessor
from extjs2react.compiler.emitter import ClassEmitter, EmittedClass
from extjs2react.compiler.imports import ImportPlan
from extjs2react.compiler.unit import UnitCompiler

__all__ = [
    "AccessorDescriptor",
    "ClassEmitter",
    "EmittedClass",
    "ImportPlan",
    "UnitCompiler",
    "synthesize_accessor",
]
