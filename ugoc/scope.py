"""ugoc.scope

Lexical scopes for the IR generator.

A `Scope` is one frame of name bindings linked to its enclosing frame. The
generator keeps exactly one active chain, pushing a frame when it enters a
function, block or loop and dropping it when it leaves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

from ugoc.builtin import BUILTINS


@dataclass(frozen=True, eq=False)
class Object:
    """A resolved binding: logical name -> storage name"""
    name: str
    mangled_name: str
    node: Any = None  # declaring AST node; None for builtins


class Scope:
    """One frame of the scope chain"""

    def __init__(self, outer: Optional[Scope] = None):
        self.outer = outer
        self.objects: Dict[str, Object] = {}

    @classmethod
    def new_child(cls, outer: Optional[Scope]) -> Scope:
        return cls(outer)

    def lookup(self, name: str) -> Optional[Object]:
        """Return the innermost binding for `name`, or None."""
        _, obj = self.lookup_parent(name)
        return obj

    def lookup_parent(self, name: str) -> Tuple[Optional[Scope], Optional[Object]]:
        """Like `lookup`, but also return the frame holding the binding."""
        s: Optional[Scope] = self
        while s is not None:
            obj = s.objects.get(name)
            if obj is not None:
                return s, obj
            s = s.outer
        return None, None

    def declare(self, obj: Object) -> Object:
        """Bind `obj` in this frame.

        First declaration wins: if the frame already binds the name, nothing
        changes and the existing object is returned.
        """
        alt = self.objects.get(obj.name)
        if alt is not None:
            return alt
        self.objects[obj.name] = obj
        return obj

    def chain(self) -> Iterator[Scope]:
        s: Optional[Scope] = self
        while s is not None:
            yield s
            s = s.outer

    def __contains__(self, name: str) -> bool:
        return name in self.objects

    def __len__(self) -> int:
        return len(self.objects)

    def __str__(self) -> str:
        lines = []
        for s in self.chain():
            lines.append(f"scope {id(s):#x} {{")
            for obj in s.objects.values():
                kind = type(obj.node).__name__ if obj.node is not None else "builtin"
                lines.append(f"\t{kind} {obj.name} -> {obj.mangled_name}")
            lines.append("}")
        return "\n".join(lines) + "\n"


def universe() -> Scope:
    """Return a fresh outermost frame holding the runtime builtins."""
    s = Scope()
    for name, mangled in BUILTINS.items():
        s.declare(Object(name=name, mangled_name=mangled))
    return s
