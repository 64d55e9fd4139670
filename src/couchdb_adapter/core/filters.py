"""Translation of generic filters into CouchDB's Mango query dialect."""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

# Mango distinguishes "field equals literal" from "field satisfies operator",
# so every filter value is classified into one of these two variants.


@dataclass(frozen=True)
class Literal:
    """A bare value, matched by equality."""

    value: Any

    def to_selector(self) -> Dict[str, Any]:
        return {"$eq": self.value}


@dataclass(frozen=True)
class Comparison:
    """An expression already written in the query dialect."""

    expression: Any

    def to_selector(self) -> Any:
        return self.expression


FilterValue = Union[Literal, Comparison]


def classify(field: str, value: Any) -> FilterValue:
    """Classify a top-level selector entry.

    Combination operators (``$or``, ``$and``, ...) and mapping values
    (``{"$gt": 1}`` or nested sub-field selectors) are comparisons; anything
    else is a literal.
    """
    if field.startswith("$") or isinstance(value, Mapping):
        return Comparison(value)
    return Literal(value)


def normalize_selector(query: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Build a Mango selector from a generic query mapping.

    Args:
        query: Field to literal-or-comparison mapping. None or empty selects all

    Returns:
        New selector dict; the input mapping is left untouched
    """
    if not query:
        return {}
    return {field: classify(field, value).to_selector() for field, value in query.items()}


def _direction(value: Any) -> str:
    if isinstance(value, str):
        lowered = value.lower()
        if lowered in ("asc", "desc"):
            return lowered
        raise ValueError(f"Unsupported sort direction: {value!r}")
    if value in (1, -1):
        return "asc" if value == 1 else "desc"
    raise ValueError(f"Unsupported sort direction: {value!r}")


def _field_direction(field: str) -> Dict[str, str]:
    if field.startswith("-"):
        return {field[1:]: "desc"}
    return {field: "asc"}


def normalize_sort(
    sort: Union[None, str, Sequence[Any], Mapping[str, Any]],
) -> Optional[List[Dict[str, str]]]:
    """Convert a sort specification into Mango's ``[{field: direction}]`` form.

    Accepted shapes:
        - ``"-votes title"`` (space or comma separated, ``-`` means descending)
        - ``["createdAt", "-title"]`` or ``[{"createdAt": "asc"}]``
        - ``{"createdAt": 1, "title": -1}``
    """
    if not sort:
        return None
    if isinstance(sort, str):
        fields = sort.replace(",", " ").split()
        return [_field_direction(f) for f in fields]
    if isinstance(sort, Mapping):
        return [{field: _direction(d)} for field, d in sort.items()]

    result: List[Dict[str, str]] = []
    for item in sort:
        if isinstance(item, str):
            result.append(_field_direction(item))
        elif isinstance(item, Mapping):
            result.extend({field: _direction(d)} for field, d in item.items())
        else:
            raise ValueError(f"Unsupported sort item: {item!r}")
    return result
