"""String normalization and similarity primitives shared by the reconciler,
the validator and the field mapper."""
import re
import unicodedata
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

# Weights of the combined metric; they sum to 1
LEVENSHTEIN_WEIGHT = 0.7
TOKEN_WEIGHT = 0.3

# Candidates this much shorter/longer than the query are not scored
MIN_LENGTH_RATIO = 0.2

_WS_RE = re.compile(r"\s+")
_AFFIX_PREFIX_RE = re.compile(r"^(field|column|col)_", re.I)
_AFFIX_SUFFIX_RE = re.compile(r"_(field|column|col)$", re.I)


@dataclass(frozen=True)
class NormalizationOptions:
    """Toggles for :func:`normalize`. Defaults fold case, accents and spacing."""
    case_sensitive: bool = False
    trim_whitespace: bool = True
    remove_accents: bool = True
    collapse_whitespace: bool = True


DEFAULT_NORMALIZATION = NormalizationOptions()


@dataclass(frozen=True)
class BestMatch:
    index: int
    value: str
    similarity: float


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: str, options: NormalizationOptions = DEFAULT_NORMALIZATION) -> str:
    """
    Normalize a string for comparison.

    Steps run in a fixed order: trim, lowercase, accent stripping, whitespace
    collapsing. Each one can be switched off through ``options``. When trimming
    is off but collapsing is on, the leading and trailing whitespace is kept
    as-is and only the interior runs are collapsed.

    Args:
        text: Input string
        options: Normalization toggles

    Returns:
        Normalized string
    """
    out = str(text)

    if options.trim_whitespace:
        out = out.strip()

    if not options.case_sensitive:
        out = out.lower()

    if options.remove_accents:
        out = strip_accents(out)

    if options.collapse_whitespace:
        if options.trim_whitespace:
            out = _WS_RE.sub(" ", out).strip()
        else:
            content = out.strip()
            if content:
                start = out.index(content[0])
                end = start + len(content)
                out = out[:start] + _WS_RE.sub(" ", content) + out[end:]

    return out


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit insertion, deletion and substitution costs."""
    return Levenshtein.distance(a, b)


def levenshtein_similarity(a: str, b: str) -> float:
    if a == b:
        return 1.0
    max_len = max(len(a), len(b))
    return (max_len - edit_distance(a, b)) / max_len


def combined_similarity(a: str, b: str) -> float:
    """
    Blend normalized edit distance with token overlap.

    The score lies in [0, 1], equals 1.0 for identical inputs and is symmetric.
    Inputs are compared as given; callers normalize first when they want
    case or accent folding.
    """
    if a == b:
        return 1.0
    lev = levenshtein_similarity(a, b)
    tok = fuzz.token_sort_ratio(a, b) / 100.0
    score = LEVENSHTEIN_WEIGHT * lev + TOKEN_WEIGHT * tok
    return max(0.0, min(1.0, score))


def find_best_matches(
    query: str,
    candidates: Sequence,
    min_score: float = 0.6,
    limit: int = 5,
    options: NormalizationOptions = DEFAULT_NORMALIZATION,
    scorer: Callable[[str, str], float] = combined_similarity,
) -> List[BestMatch]:
    """
    Rank candidates by similarity to ``query``.

    Both sides are normalized before scoring. A blank query matches nothing.
    Non-string candidates and candidates that are blank after normalization
    are skipped, as are candidates whose length differs too much from the
    query. Ties keep the candidates' original order.

    Args:
        query: String to look for
        candidates: Candidate strings
        min_score: Minimum similarity to keep a candidate
        limit: Maximum number of matches returned
        scorer: Similarity function applied to the normalized strings

    Returns:
        Matches sorted by descending similarity
    """
    norm_query = normalize(query, options)
    results: List[BestMatch] = []
    if not norm_query.strip():
        return results

    for i, cand in enumerate(candidates):
        if not isinstance(cand, str) or not cand:
            continue
        norm_cand = normalize(cand, options)
        if not norm_cand.strip():
            continue

        if norm_cand == norm_query:
            results.append(BestMatch(i, cand, 1.0))
            continue

        ratio = length_ratio(norm_query, norm_cand)
        if ratio is None or ratio < MIN_LENGTH_RATIO:
            continue

        score = scorer(norm_query, norm_cand)
        if score >= min_score:
            results.append(BestMatch(i, cand, score))

    results.sort(key=lambda m: m.similarity, reverse=True)
    return results[:max(limit, 0)]


def to_snake_case(text: str) -> str:
    """``"First Name"``, ``"firstName"`` and ``"First-Name"`` all give ``"first_name"``."""
    out = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", str(text))
    out = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", out)
    out = re.sub(r"[^A-Za-z0-9]+", "_", strip_accents(out))
    return out.strip("_").lower()


def to_camel_case(text: str) -> str:
    parts = [p for p in to_snake_case(text).split("_") if p]
    if not parts:
        return ""
    return parts[0] + "".join(p[:1].upper() + p[1:] for p in parts[1:])


def strip_affixes(name: str) -> str:
    """Drop ``field_``/``col_``/``column_`` prefixes and the matching suffixes."""
    return _AFFIX_SUFFIX_RE.sub("", _AFFIX_PREFIX_RE.sub("", str(name)))


def length_ratio(a: str, b: str) -> Optional[float]:
    longest = max(len(a), len(b))
    if longest == 0:
        return None
    return min(len(a), len(b)) / longest
