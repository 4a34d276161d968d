"""Resolve `${...}` placeholders against a node and its parent chain."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pomtools.exceptions import BrokenParentChainError, ParentCycleError, PropertyCycleError

if TYPE_CHECKING:
    from pathlib import Path

    from pomtools.pom import Pom
    from pomtools.registry import ProjectRegistry

logger = logging.getLogger(__name__)

VERSION_KEYS = frozenset({"version", "project.version", "pom.version"})
GROUP_KEYS = frozenset({"project.groupId", "pom.groupId"})
NAME_KEYS = frozenset({"project.artifactId", "pom.artifactId"})

_PLAIN, _DOLLAR, _PLACEHOLDER = range(3)


class PropertyResolver:
    """Placeholder substitution engine.

    Unknown placeholders are preserved as-is. A declared parent that is
    missing from the registry is fatal, since the chain cannot be followed.
    """

    def __init__(self, registry: ProjectRegistry) -> None:
        self.registry = registry
        self._active: set[tuple[Path, str]] = set()

    def resolve(self, pom: Pom, value: str | None) -> str | None:
        """Return `value` with every resolvable `${name}` substituted.

        The scan is a single left-to-right pass. A `$` that does not open a
        placeholder is copied through, and an unterminated `${...` at the end
        of the input is emitted as it was written.
        """
        if value is None:
            return None

        out: list[str] = []
        sym: list[str] = []
        state = _PLAIN
        for c in value:
            if state == _PLAIN:
                if c == "$":
                    state = _DOLLAR
                else:
                    out.append(c)
            elif state == _DOLLAR:
                if c == "{":
                    state = _PLACEHOLDER
                else:
                    out.append("$" + c)
                    state = _PLAIN
            else:
                if c == "}":
                    key = "".join(sym)
                    found = self.lookup(pom, key)
                    out.append("${" + key + "}" if found is None else found)
                    sym = []
                    state = _PLAIN
                else:
                    sym.append(c)

        if state == _DOLLAR:
            out.append("$")
        elif state == _PLACEHOLDER:
            out.append("${" + "".join(sym))
        return "".join(out)

    def lookup(self, pom: Pom, key: str) -> str | None:
        """Look up a single property for `pom`.

        Raises:
            PropertyCycleError: If resolving `key` needs `key` itself.
            BrokenParentChainError: If a declared parent is not registered.
        """
        marker = (pom.path, key)
        if marker in self._active:
            raise PropertyCycleError(f"Property ${{{key}}} of {pom.path} refers to itself")
        self._active.add(marker)
        try:
            if key in VERSION_KEYS:
                return pom.version
            if key in GROUP_KEYS:
                return pom.group
            if key in NAME_KEYS:
                return pom.name
            return self._lookup_chain(pom, key)
        finally:
            self._active.discard(marker)

    def _lookup_chain(self, pom: Pom, key: str) -> str | None:
        current: Pom | None = pom
        seen: set[Path] = set()
        while current is not None:
            if current.path in seen:
                raise ParentCycleError(f"Parent cycle through {current.path}")
            seen.add(current.path)

            raw = current.properties().get(key)
            if raw is not None:
                return self.resolve(current, raw)

            parent_group, parent_name = current.parent_ref()
            if parent_group is None or parent_name is None:
                break
            parent_id = f"{parent_group}:{parent_name}"
            parent = self.registry.get(parent_id)
            if parent is None:
                raise BrokenParentChainError(
                    f"Cannot find parent {parent_id} of {current.path} while resolving ${{{key}}}"
                )
            if parent is current:
                break
            current = parent

        logger.debug("Property %s not found for %s", key, pom.path)
        return None
