""" Scoped registry of the messages and enums compiled so far """

import logging
from typing import Dict, List, Optional, Set, Tuple

from protoize.protomodel import (
    ANY, BYTES, PSEUDO_BOOLEAN, PSEUDO_FLOAT, PSEUDO_INTEGER, PSEUDO_NUMBER, STRING,
    Builtin, Container, Enum, Message, Package, ProtoType)

logger = logging.getLogger(__name__)

# OpenAPI type names (and a few protobuf names) that never resolve to a user type
BUILTIN_TYPES: Dict[str, Builtin] = {
    'bytes': BYTES,
    'string': STRING,
    'integer': PSEUDO_INTEGER,
    'float': PSEUDO_FLOAT,
    'number': PSEUDO_NUMBER,
    'boolean': PSEUDO_BOOLEAN,
    'google.protobuf.Any': ANY,
}

Scope = Tuple[Container, ...]


class TypeRegistry:
    """
    Holds every message and enum declared during one compilation run.

    Types are filed under the container (package or message) that declares
    them. Lookups walk a scope chain from the innermost container outwards,
    after checking the builtin names.

    Attributes:
        package: The package at the root of every scope chain.
    """

    def __init__(self, package: Package) -> None:
        self.package = package
        self._types: Dict[Container, List[ProtoType]] = {}
        self._seen_keys: Set[str] = set()

    def lookup(self, name: str, scope: Scope) -> Optional[ProtoType]:
        """Find a type by exact name. Builtins shadow user types."""
        if name in BUILTIN_TYPES:
            return BUILTIN_TYPES[name]
        for container in reversed(scope):
            for t in self._types.get(container, []):
                if t.name == name:
                    return t
        return None

    def register(self, t: ProtoType, parent: Container, scope: Scope) -> bool:
        """
        Declare `t` inside `parent` and append it to the parent's children.

        Only messages and enums become declarations. Registration is skipped if
        the name is already qualified (contains a '.'), if the type is already
        declared at package level, or if the same name was registered before
        under the same scope chain.

        Args:
            t: The type to declare.
            parent: The package or message that will own the declaration.
            scope: The scope chain active while `t` was compiled.

        Returns:
            True if the type was added to the parent.
        """
        if not isinstance(t, (Message, Enum)):
            return False
        if '.' in t.name:
            return False
        if t in self._types.get(self.package, []):
            return False
        key = '#'.join(c.name for c in scope) + '#' + t.name
        if key in self._seen_keys:
            logger.debug("skipping duplicate declaration %s", key)
            return False
        self._seen_keys.add(key)
        declared = self._types.setdefault(parent, [])
        if t in declared:
            return False
        declared.append(t)
        parent.add_type(t)
        return True
