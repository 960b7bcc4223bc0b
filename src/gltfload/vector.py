"""Small fixed-size vector with named component access."""

from __future__ import annotations

from typing import Iterable

__all__ = ["Vector"]

_COMPONENT_SLOTS = {"x": 0, "y": 1, "z": 2, "w": 3, "u": 0, "v": 1}


class Vector(tuple):
    """Tuple of 2 to 4 numbers readable as ``.x/.y/.z/.w`` or ``.u/.v``.

    Multi-letter names swizzle: ``v.xy`` or ``v.zyx`` build a new Vector.
    Reading a component the vector does not have returns ``None``.
    """

    __slots__ = ()

    def __new__(cls, values: Iterable[float]) -> "Vector":
        items = tuple(values)
        if not 2 <= len(items) <= 4:
            raise ValueError(
                f"Vector needs 2 to 4 components, got {len(items)}"
            )
        return super().__new__(cls, items)

    def _component(self, name: str):
        slot = _COMPONENT_SLOTS[name]
        return self[slot] if slot < len(self) else None

    @property
    def x(self):
        return self._component("x")

    @property
    def y(self):
        return self._component("y")

    @property
    def z(self):
        return self._component("z")

    @property
    def w(self):
        return self._component("w")

    @property
    def u(self):
        return self._component("u")

    @property
    def v(self):
        return self._component("v")

    def __getattr__(self, name: str):
        if (
            2 <= len(name) <= 4
            and all(c in _COMPONENT_SLOTS for c in name)
        ):
            values = [self._component(c) for c in name]
            if any(val is None for val in values):
                return None
            return Vector(values)
        raise AttributeError(name)

    def __repr__(self) -> str:
        return f"Vector({', '.join(repr(c) for c in self)})"
