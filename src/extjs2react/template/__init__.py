"""Template micro-language compiler."""

from extjs2react.template.compiler import TemplateCompiler, scope_variables
from extjs2react.template.interpolation import convert_interpolations
from extjs2react.template.parser import parse_template

__all__ = [
    "TemplateCompiler",
    "convert_interpolations",
    "parse_template",
    "scope_variables",
]
