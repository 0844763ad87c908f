"""
Logic engine for Feature Logic.

Provides expression parsing, evaluation and canonical export.
"""

from .parser import ExpressionParser, build, load, load_file, parse
from .evaluator import ExpressionEvaluator, evaluate
from .exporter import export, save, to_yaml

__all__ = [
    "ExpressionParser",
    "ExpressionEvaluator",
    "build",
    "load",
    "load_file",
    "parse",
    "evaluate",
    "export",
    "save",
    "to_yaml",
]
