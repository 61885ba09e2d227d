"""Multi-term project name matching.

Provides:
- split_query(): Split a raw query string into terms
- compile_terms(): Build one case-insensitive pattern per term
- match_projects(): Names of projects matching every term

Terms are regular expressions searched anywhere in the name, so a plain
word behaves as a case-insensitive substring. A term that is not a valid
pattern (e.g. "c[" or "*api") is matched literally instead.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .store import Project

logger = logging.getLogger(__name__)


def split_query(query: str) -> list[str]:
    """Split a query on whitespace into terms."""
    return query.split()


def compile_term(term: str) -> re.Pattern[str]:
    """
    Compile one term into a case-insensitive pattern.

    Falls back to a literal match if the term is not a valid regex.
    """
    try:
        return re.compile(term, re.IGNORECASE)
    except re.error as e:
        logger.debug(
            "Term %r is not a valid pattern (%s), matching literally", term, e
        )
        return re.compile(re.escape(term), re.IGNORECASE)


def compile_terms(terms: Iterable[str]) -> list[re.Pattern[str]]:
    """Compile every non-blank term, preserving order."""
    return [compile_term(t) for t in terms if t and not t.isspace()]


def matches_all(name: str, patterns: Sequence[re.Pattern[str]]) -> bool:
    """Check that name matches every pattern (stops at the first miss)."""
    return all(p.search(name) for p in patterns)


def match_projects(
    projects: Iterable[Project], terms: Iterable[str]
) -> list[str]:
    """
    Find projects whose name matches every term.

    Args:
        projects: Projects in index order
        terms: Query terms; an empty list matches everything

    Returns:
        Matching project names, in index order
    """
    patterns = compile_terms(terms)
    return [p.name for p in projects if matches_all(p.name, patterns)]
