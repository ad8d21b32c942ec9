"""
Duplicates: detect likely re-submissions against expense history.
"""
from .detector import (
    compare_record, descriptions_match, description_similarity,
    find_duplicates, find_project_expenses, find_related_expenses,
)

__all__ = [
    "compare_record", "descriptions_match", "description_similarity",
    "find_duplicates", "find_project_expenses", "find_related_expenses",
]
