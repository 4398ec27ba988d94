"""Data model for repositories, fetched files and dependency records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from xml.etree.ElementTree import Element

from constants import PackageManagers


@dataclass(frozen=True)
class RepositoryHandle:
    """Remote repository identity.

    ``id`` keys the result cache; ``full_name`` (``owner/name``) addresses the
    repository in API paths and logs.
    """

    id: int
    full_name: str


@dataclass(frozen=True)
class RemoteFile:
    """A manifest discovered in a repository.

    The scanner fills ``text`` and then ``xml`` by building new instances with
    ``dataclasses.replace``.
    """

    name: str
    path: str
    text: Optional[str] = None
    xml: Optional[Element] = None


@dataclass(frozen=True)
class DependencyRecord:
    """A declared package dependency."""

    name: str
    type: str = PackageManagers.NUGET.value
    core: int = 1

    def to_dict(self) -> Dict[str, Any]:
        """Serialized shape used by downstream consumers."""
        return {"type": self.type, "name": self.name, "core": self.core}


ExtractionResult = List[DependencyRecord]
