"""Model-state key helpers shared by the validators and the host pipeline."""

from typing import Iterable, Union


def combine_names(prefix: str, name: str) -> str:
    """Join a key prefix and a property path.

    ``combine_names("person", "name")`` -> ``"person.name"``
    ``combine_names("people", "[0].name")`` -> ``"people[0].name"``
    """
    if not prefix:
        return name or ""
    if not name:
        return prefix
    if name.startswith("["):
        return prefix + name
    return f"{prefix}.{name}"


def location_to_path(loc: Iterable[Union[str, int]]) -> str:
    """Render a pydantic error location as a property path: ('items', 1, 'age') -> 'items[1].age'."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = combine_names(path, str(part))
    return path
