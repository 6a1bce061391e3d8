"""
Route configuration model: the routes table persisted as one unit.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class Route:
    """A path prefix mapped to an upstream base URL."""

    path: str
    target: str

    _FIELDS = ("path", "target")

    @classmethod
    def from_dict(cls, data) -> "Route":
        if not isinstance(data, dict):
            raise ValueError("each route must be an object with 'path' and 'target'")

        unknown = sorted(set(data) - set(cls._FIELDS))
        if unknown:
            raise ValueError(f"unknown route field(s): {', '.join(unknown)}")
        missing = [name for name in cls._FIELDS if name not in data]
        if missing:
            raise ValueError(f"route is missing field(s): {', '.join(missing)}")

        path = data["path"]
        target = data["target"]
        if not isinstance(path, str) or not path:
            raise ValueError("route 'path' must be a non-empty string")
        if not isinstance(target, str) or not target:
            raise ValueError("route 'target' must be a non-empty string")
        return cls(path=path, target=target)

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "target": self.target}


@dataclass(frozen=True)
class Config:
    """
    Full routing configuration.

    ``routes`` keeps the order the admin saved. ``ordered_routes`` is the same
    list sorted longest path first; ``sorted`` is stable, so routes of equal
    length keep their saved order.
    """

    routes: Tuple[Route, ...] = ()
    ordered_routes: Tuple[Route, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        routes = tuple(self.routes)
        object.__setattr__(self, "routes", routes)
        object.__setattr__(self, "ordered_routes", tuple(sorted(routes, key=lambda r: len(r.path), reverse=True)))

    @classmethod
    def empty(cls) -> "Config":
        return cls(routes=())

    @classmethod
    def from_dict(cls, data) -> "Config":
        """Build a Config from its JSON shape, rejecting unknown or missing fields."""
        if not isinstance(data, dict):
            raise ValueError("config must be an object with a 'routes' array")

        unknown = sorted(set(data) - {"routes"})
        if unknown:
            raise ValueError(f"unknown config field(s): {', '.join(unknown)}")
        if "routes" not in data:
            raise ValueError("config is missing 'routes'")

        return cls(routes=routes_from_list(data["routes"]))

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {"routes": [route.to_dict() for route in self.routes]}


def routes_from_list(items) -> Tuple[Route, ...]:
    """Parse a JSON array of route objects."""
    if not isinstance(items, list):
        raise ValueError("'routes' must be an array")

    routes = []
    for index, item in enumerate(items):
        try:
            routes.append(Route.from_dict(item))
        except ValueError as e:
            raise ValueError(f"routes[{index}]: {e}") from e
    return tuple(routes)
