"""
Nested statistics helper.

Reporting endpoints aggregate flat ``values().annotate()`` rows in the
database and return them grouped two levels deep, e.g.
department -> program -> [rows]. This module does the grouping.
"""

from typing import Any, Dict, Iterable, List


def nest_rows(
    rows: Iterable[Dict[str, Any]],
    outer: str,
    inner: str,
    inner_label: str,
    children_label: str,
) -> List[Dict[str, Any]]:
    """
    Group flat aggregate rows by ``outer`` and then by ``inner``.

    Args:
        rows: Dictionaries as produced by ``QuerySet.values(...).annotate(...)``
        outer: Key of the top-level grouping (e.g. ``"department"``)
        inner: Key of the second-level grouping (e.g. ``"program"``)
        inner_label: Name used for the second-level list in the output
        children_label: Name used for the leaf list of each inner group

    Returns:
        ``[{outer: ..., inner_label: [{inner: ..., children_label: [...]}]}]``
        in first-seen order of the input rows.

    Example:
        >>> nest_rows(
        ...     [{"department": "CE", "program": "BSc CE", "level": 100, "total": 2}],
        ...     "department", "program", "programs", "levels",
        ... )
        [{'department': 'CE', 'programs': [{'program': 'BSc CE', 'levels': [{'level': 100, 'total': 2}]}]}]
    """
    grouped: Dict[Any, Dict[Any, List[Dict[str, Any]]]] = {}
    for row in rows:
        leaf = {k: v for k, v in row.items() if k not in (outer, inner)}
        grouped.setdefault(row[outer], {}).setdefault(row[inner], []).append(leaf)

    return [
        {
            outer: outer_value,
            inner_label: [
                {inner: inner_value, children_label: leaves}
                for inner_value, leaves in inner_groups.items()
            ],
        }
        for outer_value, inner_groups in grouped.items()
    ]
