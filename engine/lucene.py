from __future__ import annotations

import re

_WS_RE = re.compile(r"\s+")

# Reserved by the Lucene classic query parser: + - && || ! ( ) { } [ ] ^ " ~ * ? : \ /
_RESERVED = r"&&|\|\||[+\-!(){}\[\]^\"~*?:\\/]"
# An already escaped reserved sequence is matched first and kept as-is.
_ESCAPE_RE = re.compile(rf"(\\(?:{_RESERVED}))|({_RESERVED})")


def escape_lucene(term: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        if match.group(1):
            return match.group(1)
        return "\\" + match.group(2)

    return _ESCAPE_RE.sub(_replace, str(term or ""))


def fuzzy_distance(length: int) -> int:
    """Edit distance allowed for a token, following Lucene's AUTO fuzziness."""
    if length <= 2:
        return 0
    if length <= 5:
        return 1
    return 2


def _tokens(phrase: str) -> list[str]:
    cleaned = str(phrase or "").strip()
    if not cleaned:
        return []
    return _WS_RE.split(cleaned)


def _expand_token(token: str, *, fuzzy: bool, wildcard: bool) -> str:
    escaped = escape_lucene(token)
    distance = fuzzy_distance(len(token))
    strategies: list[str] = []
    if wildcard:
        strategies.append(f"{escaped}*")
    if fuzzy and distance > 0:
        strategies.append(f"{escaped}~{distance}")
    if not strategies:
        return escaped
    if len(strategies) == 1:
        return strategies[0]
    return f"({' OR '.join(strategies)})"


def build_lucene_terms(
    phrase: str,
    *,
    fuzzy: bool = False,
    wildcard: bool = False,
    wildcard_all_tokens: bool = False,
) -> str:
    """Expand ``phrase`` into AND-joined token fragments without a field prefix.

    The wildcard suffix goes on the final token only, the usual instant-search
    convention for a phrase that is still being typed. Pass
    ``wildcard_all_tokens=True`` to prefix-match every token instead.
    """
    tokens = _tokens(phrase)
    if not tokens:
        return ""
    last = len(tokens) - 1
    fragments = [
        _expand_token(
            token,
            fuzzy=fuzzy,
            wildcard=wildcard and (wildcard_all_tokens or index == last),
        )
        for index, token in enumerate(tokens)
    ]
    return " AND ".join(fragments)


def construct_lucene_query(
    field: str,
    phrase: str,
    *,
    fuzzy: bool = False,
    wildcard: bool = False,
    wildcard_all_tokens: bool = False,
) -> str:
    """Build a ``field:(...)`` query fragment, e.g. ``artist:((Adele* OR Adele~1))``.

    An empty phrase yields an empty string rather than an empty field group.
    """
    terms = build_lucene_terms(
        phrase,
        fuzzy=fuzzy,
        wildcard=wildcard,
        wildcard_all_tokens=wildcard_all_tokens,
    )
    if not terms:
        return ""
    return f"{field}:({terms})"
