from typing import Iterable, Literal

Disambiguate = Literal["compatible", "earlier", "later", "raise"]

# "compatible" and "raise" start out like "earlier"; the difference is
# in how gaps and folds are handled afterwards.
_DISAMBIGUATE_TO_FOLD: dict[str, Literal[0, 1]] = {
    "compatible": 0,
    "earlier": 0,
    "later": 1,
    "raise": 0,
}


def as_fold(disambiguate: str) -> Literal[0, 1]:
    try:
        return _DISAMBIGUATE_TO_FOLD[disambiguate]
    except (KeyError, TypeError):
        raise ValueError(f"Invalid disambiguate setting: {disambiguate!r}")


def simplify_abbreviation(name: str, others: Iterable[str] = ()) -> str:
    """Drop the standard/daylight marker from a zone abbreviation,
    so that e.g. both ``EST`` and ``EDT`` become ``ET``.

    This only happens if one of ``others`` (the zone's abbreviations
    at other times of the year) simplifies to the same name.
    Otherwise the name is returned unchanged, so ``IST`` or ``BST``
    keep their meaning.
    """
    simple = _drop_marker(name)
    if simple != name and any(
        other != name and _drop_marker(other) == simple for other in others
    ):
        return simple
    return name


def _drop_marker(name: str) -> str:
    # Numeric abbreviations (``+03``, ``-0430``) never have a marker
    if len(name) >= 3 and name.isalpha() and name.endswith(("ST", "DT")):
        return name[:-2] + "T"
    return name
