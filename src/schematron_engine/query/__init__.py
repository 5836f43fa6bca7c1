"""Query-evaluation collaborators."""

from .base import QueryEvaluator, QueryResult, format_number
from .lxml_evaluator import LxmlQueryEvaluator, anchor_relative_paths

__all__ = [
    "QueryEvaluator",
    "QueryResult",
    "LxmlQueryEvaluator",
    "anchor_relative_paths",
    "format_number",
]
