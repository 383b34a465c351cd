"""Field mapper – suggests which import column feeds which target field."""

_SUGGESTER_EXPORTS = [
    "MappingSuggester",
    "TargetField",
    "FieldMappingSuggestion",
    "MappingReport",
    "suggest_mapping",
    "suggest_mapping_detailed",
]

_TOKEN_EXPORTS = [
    "BaseTokenBuilder",
    "TokenBuilderRegistry",
    "add_token_builder",
    "field_aliases",
]

__all__ = _SUGGESTER_EXPORTS + _TOKEN_EXPORTS


def __getattr__(name: str):
    if name in _SUGGESTER_EXPORTS:
        from . import mapping_suggester
        return getattr(mapping_suggester, name)
    if name in _TOKEN_EXPORTS:
        from . import token_builders
        return getattr(token_builders, name)
    raise AttributeError(f"module 'src.field_mapper' has no attribute {name!r}")
