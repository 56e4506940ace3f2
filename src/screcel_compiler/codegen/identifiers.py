"""
Identifier allocation for generated code.

Scratch ids and display names are arbitrary strings; the registry maps each
id to a stable, collision-free identifier of the form
``<prefix>_<n>_<sanitized hint>`` the first time it is seen.
"""

import re
from typing import Dict, ItemsView, Optional

_UNSAFE = re.compile(r"[^A-Za-z0-9_]")


def sanitize(text: str) -> str:
    """Replace every character outside [A-Za-z0-9_] with an underscore."""
    return _UNSAFE.sub("_", text)


class IdentifierRegistry:
    """
    Memoizing id -> identifier map.

    Example:
        registry = IdentifierRegistry()
        registry.resolve("v1", "my score")   # 'id_1_my_score'
        registry.resolve("v1", "renamed")    # 'id_1_my_score' (first hint wins)
        registry.resolve("x y")              # 'id_2_x_y'
    """

    def __init__(self, prefix: str = "id"):
        self.prefix = prefix
        self._names: Dict[str, str] = {}

    def resolve(self, entity_id: str, hint: Optional[str] = None) -> str:
        if entity_id in self._names:
            return self._names[entity_id]

        base = entity_id if hint is None else hint
        name = f"{self.prefix}_{len(self._names) + 1}_{sanitize(base)}"
        self._names[entity_id] = name
        return name

    def __contains__(self, entity_id) -> bool:
        return entity_id in self._names

    def __len__(self) -> int:
        return len(self._names)

    def items(self) -> ItemsView[str, str]:
        return self._names.items()
