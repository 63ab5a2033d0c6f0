"""
String similarity primitives for CredentialVerify.

Edit-distance, token-overlap, containment and degree-abbreviation checks
over already-normalized strings. All functions are pure and accept empty
or missing input.
"""

from typing import Iterable, Sequence, Set

from Levenshtein import distance as levenshtein_distance

# Synonym groups for degree titles; two degrees are equivalent when both
# contain a member of the same group
DEFAULT_DEGREE_ABBREVIATIONS = (
    ("bachelor of psychology", "b psyc", "ba psychology", "bs psychology"),
    ("master of psychology", "m psyc", "ma psychology", "ms psychology"),
    ("doctor of psychology", "psyd", "phd psychology"),
    ("bachelor of science", "bsc", "bs"),
    ("master of science", "msc", "ms"),
    ("doctor of philosophy", "phd"),
)


def _text(value) -> str:
    return value if isinstance(value, str) else ""


def _tokens(value) -> Set[str]:
    return set(_text(value).split())


def edit_similarity(text1: str, text2: str) -> float:
    """
    Levenshtein similarity: 1 - distance / longer length.

    Two empty strings score 0.0; absence is not a positive signal.
    """
    text1, text2 = _text(text1), _text(text2)
    longest = max(len(text1), len(text2))
    if longest == 0:
        return 0.0

    similarity = 1.0 - levenshtein_distance(text1, text2) / longest
    return min(1.0, max(0.0, similarity))


def tokens_overlap(text1: str, text2: str, min_token_length: int, min_shared: int = 2) -> bool:
    """
    Binary token-overlap signal.

    Counts distinct tokens present in both strings that are longer than
    ``min_token_length`` characters; matches when at least ``min_shared``
    such tokens are shared.
    """
    shared = {token for token in _tokens(text1) & _tokens(text2) if len(token) > min_token_length}
    return len(shared) >= min_shared


def contains_match(text1: str, text2: str) -> bool:
    """True if one string is a non-empty substring of the other."""
    text1, text2 = _text(text1), _text(text2)
    return bool((text1 and text1 in text2) or (text2 and text2 in text1))


def degrees_equivalent(degree1: str, degree2: str,
                       abbreviations: Iterable[Sequence[str]] = DEFAULT_DEGREE_ABBREVIATIONS) -> bool:
    """True if both degrees contain a member of the same synonym group."""
    degree1, degree2 = _text(degree1), _text(degree2)
    if not degree1 or not degree2:
        return False

    for group in abbreviations:
        if any(variant in degree1 for variant in group) and any(variant in degree2 for variant in group):
            return True

    return False


def token_overlap_ratio(text1: str, text2: str) -> float:
    """Shared distinct tokens divided by the larger distinct token count."""
    tokens1, tokens2 = _tokens(text1), _tokens(text2)
    if not tokens1 or not tokens2:
        return 0.0

    return len(tokens1 & tokens2) / max(len(tokens1), len(tokens2))


def email_similarity(email1: str, email2: str, domain_factor: float = 0.7) -> float:
    """
    Similarity of two normalized emails.

    1.0 when equal; ``domain_factor`` times the local-part edit similarity
    when only the domains agree; otherwise 0.0.
    """
    email1, email2 = _text(email1).lower(), _text(email2).lower()
    if not email1 or not email2:
        return 0.0

    if email1 == email2:
        return 1.0

    local1, _, domain1 = email1.rpartition("@")
    local2, _, domain2 = email2.rpartition("@")
    if domain1 and domain1 == domain2:
        return domain_factor * edit_similarity(local1, local2)

    return 0.0


def names_match(name1: str, name2: str, min_token_length: int = 2, min_shared: int = 2) -> bool:
    """Exact, containment, or at least ``min_shared`` significant shared name tokens."""
    name1, name2 = _text(name1), _text(name2)
    if not name1 or not name2:
        return False

    return (name1 == name2
            or contains_match(name1, name2)
            or tokens_overlap(name1, name2, min_token_length, min_shared))


def institutions_match(institution1: str, institution2: str,
                       min_token_length: int = 3, min_shared: int = 2) -> bool:
    """Exact, containment, or at least ``min_shared`` significant shared institution tokens."""
    institution1, institution2 = _text(institution1), _text(institution2)
    if not institution1 or not institution2:
        return False

    return (institution1 == institution2
            or contains_match(institution1, institution2)
            or tokens_overlap(institution1, institution2, min_token_length, min_shared))


def degrees_match(degree1: str, degree2: str,
                  abbreviations: Iterable[Sequence[str]] = DEFAULT_DEGREE_ABBREVIATIONS) -> bool:
    """Exact, containment, or abbreviation-table equivalence."""
    degree1, degree2 = _text(degree1), _text(degree2)
    if not degree1 or not degree2:
        return False

    return (degree1 == degree2
            or contains_match(degree1, degree2)
            or degrees_equivalent(degree1, degree2, abbreviations))
