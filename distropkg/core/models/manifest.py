"""
Manifest entry model — one surviving line of a package manifest.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class PackageManifestEntry(BaseModel):
    """A package named by a manifest line.

    ``distro_filter`` is the lower-cased tag set from a ``dist:``
    directive, or None when the line carries no directive.
    """

    model_config = ConfigDict(frozen=True)

    package_name: str
    distro_filter: frozenset[str] | None = None
    defer_flag: bool = False

    def applies_to(self, distro_tag: str) -> bool:
        """Whether this entry should be installed on ``distro_tag``."""
        if self.defer_flag:
            return False
        if self.distro_filter is None:
            return True
        return distro_tag.lower() in self.distro_filter
