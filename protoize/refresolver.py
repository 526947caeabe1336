""" Replaces forward-reference placeholders in a compiled package with their targets """

import logging
from typing import Callable, List, Set

from protoize.errors import ProtoizeError, UnresolvedReferenceError
from protoize.protomodel import Map, Message, Package, ProtoType, Reference, Service

logger = logging.getLogger(__name__)

ResolveFunc = Callable[[str], ProtoType]


def resolve_reference(ref: Reference, resolve_fn: ResolveFunc) -> ProtoType:
    """
    Follow a reference to its final type.

    A definition may itself resolve to another placeholder (a definition that is
    nothing but a `$ref`), so the chain is followed until a concrete type is
    reached. A chain that loops back on itself never reaches one.
    """
    seen: Set[str] = set()
    target: ProtoType = ref
    while isinstance(target, Reference):
        if target.ref in seen:
            raise UnresolvedReferenceError(ref.ref).wrap(f"circular reference chain through {target.ref}")
        seen.add(target.ref)
        target = resolve_fn(target.ref)
    return target


class ReferenceResolver:
    """
    Walks a package and splices resolved types in place of Reference placeholders.

    Each message is visited at most once, so self-referencing and mutually
    referencing messages terminate. Resolving an already resolved field is a
    no-op.
    """

    def __init__(self, resolve_fn: ResolveFunc) -> None:
        self.resolve_fn = resolve_fn
        self._visited: Set[Message] = set()

    def resolve_type(self, t: ProtoType) -> ProtoType:
        if isinstance(t, Reference):
            resolved = resolve_reference(t, self.resolve_fn)
            logger.debug("resolved %s to %s", t.ref, resolved.name)
            return self.resolve_type(resolved)
        if isinstance(t, Map):
            t.value = self.resolve_type(t.value)
        elif isinstance(t, Message):
            self.resolve_message(t)
        return t

    def resolve_message(self, message: Message) -> None:
        if message in self._visited:
            return
        self._visited.add(message)
        for child in message.children:
            if isinstance(child, Message):
                self.resolve_message(child)
        for f in message.fields:
            try:
                f.type = self.resolve_type(f.type)
            except ProtoizeError as e:
                raise e.wrap(f"failed to resolve type of field {f.name} in {message.name}")

    def resolve_package(self, package: Package) -> Package:
        for child in package.children:
            if isinstance(child, Message):
                self.resolve_message(child)
        return package


def resolve_references(package: Package, resolve_fn: ResolveFunc) -> Package:
    """Resolve every Reference placeholder reachable from the package, in place."""
    return ReferenceResolver(resolve_fn).resolve_package(package)


def find_unresolved_references(package: Package) -> List[str]:
    """Return the `$ref` strings of all Reference placeholders still reachable from the package."""
    found: List[str] = []
    visited: Set[int] = set()

    def visit(t) -> None:
        if id(t) in visited:
            return
        visited.add(id(t))
        if isinstance(t, Reference):
            found.append(t.ref)
        elif isinstance(t, Map):
            visit(t.key)
            visit(t.value)
        elif isinstance(t, Message):
            for child in t.children:
                visit(child)
            for f in t.fields:
                visit(f.type)
        elif isinstance(t, Service):
            for rpc in t.rpcs:
                visit(rpc.parameter)
                visit(rpc.response)

    for child in package.children:
        visit(child)
    return found
