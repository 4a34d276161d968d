"""Identity registry for every loaded project node."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from pomtools.exceptions import DuplicateProjectError
from pomtools.resolver import PropertyResolver

if TYPE_CHECKING:
    from pomtools.pom import Pom

logger = logging.getLogger(__name__)


class ProjectRegistry:
    """Map `groupId:artifactId` to the node that declares it.

    Iteration follows registration order so that everything derived from the
    registry is reproducible across runs.

    Args:
        on_duplicate: "error" raises `DuplicateProjectError` when a second
            descriptor file claims an identity already taken; "replace" keeps
            the most recently loaded one.
    """

    def __init__(self, on_duplicate: str = "error") -> None:
        self.on_duplicate = on_duplicate
        self._by_id: dict[str, Pom] = {}
        self._by_path: dict[Path, Pom] = {}
        self.resolver = PropertyResolver(self)

    def register(self, pom: Pom) -> None:
        identity = pom.identity
        existing = self._by_id.get(identity)
        if existing is not None and existing is not pom:
            if self.on_duplicate != "replace":
                raise DuplicateProjectError(
                    f"{identity} is declared by both {existing.path} and {pom.path}"
                )
            logger.warning("%s from %s replaces %s", identity, pom.path, existing.path)
        self._by_id[identity] = pom
        self._by_path[pom.path] = pom
        logger.debug("Registered %s (%s)", identity, pom.path)

    def get(self, identity: str) -> Pom | None:
        return self._by_id.get(identity)

    def get_by_path(self, path: Path) -> Pom | None:
        return self._by_path.get(path.resolve())

    def __contains__(self, identity: object) -> bool:
        return identity in self._by_id

    def __iter__(self) -> Iterator[Pom]:
        return iter(list(self._by_id.values()))

    def __len__(self) -> int:
        return len(self._by_id)

    def identities(self) -> list[str]:
        return list(self._by_id)
