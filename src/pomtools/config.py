"""Runtime configuration module.

Defaults are read from environment variables and may be overridden by CLI
options.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path


DUPLICATE_POLICIES = ("error", "replace")


@dataclass
class PomToolsConfig:
    """Configuration container.

    Attributes:
        manifest_path: Full build manifest listing every project
        descriptor_name: File name of a module descriptor inside its directory
        on_duplicate: What to do when two descriptors share groupId:artifactId
            ("error" or "replace")
    """

    manifest_path: Path = Path("all.mf.xml")
    descriptor_name: str = "pom.xml"
    on_duplicate: str = "error"

    @classmethod
    def from_env(cls) -> "PomToolsConfig":
        """Create configuration from environment variables.

        Environment variables:
            POMTOOLS_MANIFEST: Full manifest path (default: "all.mf.xml")
            POMTOOLS_DESCRIPTOR: Module descriptor file name (default: "pom.xml")
            POMTOOLS_ON_DUPLICATE: "error" or "replace" (default: "error")
        """
        return cls(
            manifest_path=Path(os.getenv("POMTOOLS_MANIFEST", "all.mf.xml")),
            descriptor_name=os.getenv("POMTOOLS_DESCRIPTOR", "pom.xml"),
            on_duplicate=os.getenv("POMTOOLS_ON_DUPLICATE", "error").lower(),
        )

    def with_overrides(self, **overrides: object) -> "PomToolsConfig":
        """Return a copy with the given non-None fields replaced."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)

    def validate(self) -> None:
        """Validate the configuration.

        Raises:
            ValueError: If a setting is missing or unsupported.
        """
        if not self.descriptor_name:
            raise ValueError("POMTOOLS_DESCRIPTOR must not be empty")
        if self.on_duplicate not in DUPLICATE_POLICIES:
            raise ValueError(f"Unsupported duplicate policy: {self.on_duplicate}")
