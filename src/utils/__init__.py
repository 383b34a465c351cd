"""
Shared utilities for RefHarmonizer engines.

Exports are lazy-loaded so that importing the package does not pull in
pandas until a reference-table helper is actually needed.
"""

__all__ = [
    "normalize",
    "combined_similarity",
    "edit_distance",
    "find_best_matches",
    "NormalizationOptions",
    "as_rows",
]

_SIMILARITY_EXPORTS = {
    "normalize", "combined_similarity", "edit_distance",
    "find_best_matches", "NormalizationOptions",
}


def __getattr__(name: str):
    if name in _SIMILARITY_EXPORTS:
        from src.utils import similarity_utils
        return getattr(similarity_utils, name)
    if name == "as_rows":
        from src.utils.reference_utils import as_rows
        return as_rows
    raise AttributeError(f"module 'src.utils' has no attribute {name!r}")
