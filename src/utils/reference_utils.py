from typing import Any, Dict, List, Mapping, Optional

import pandas as pd


def is_missing(value: Any) -> bool:
    """True for None and NaN-like cells; lists, dicts and other containers are never missing."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def cell_to_str(value: Any) -> Optional[str]:
    """
    Render a reference cell for string comparison.

    Integral floats (as produced by pandas for int columns holding NaN) are
    rendered without the trailing ``.0``. Booleans render as ``true``/``false``.
    Missing cells give None.
    """
    if is_missing(value):
        return None
    if pd.api.types.is_bool(value):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def as_rows(table: Any) -> List[Any]:
    """
    Turn a reference table into a list of rows.

    Accepts None, a DataFrame or any sequence of rows. DataFrame NaN cells
    become None. Rows are returned as-is otherwise, so malformed entries
    (None, non-mapping values) are left for the caller to skip.
    """
    if table is None:
        return []
    if isinstance(table, pd.DataFrame):
        if table.empty:
            return []
        return table.astype(object).where(table.notna(), None).to_dict("records")
    return list(table)


def record_rows(table: Any) -> List[Mapping]:
    return [row for row in as_rows(table) if isinstance(row, Mapping)]


def column_names(table: Any) -> List[str]:
    """Union of the column names across all rows, in first-seen order."""
    if isinstance(table, pd.DataFrame):
        return [str(c) for c in table.columns]
    seen: Dict[str, None] = {}
    for row in record_rows(table):
        for key in row.keys():
            seen.setdefault(key, None)
    return list(seen)


def is_empty_key(value: Any) -> bool:
    return is_missing(value) or value == ""
