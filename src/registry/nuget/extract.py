"""NuGet dependency extraction from parsed .csproj and packages.config documents."""
from __future__ import annotations

from typing import Any, Dict, Iterable
from xml.etree.ElementTree import Element

from constants import Constants
from models import DependencyRecord, ExtractionResult
from .parse import parse_xml, _file_name


def _collect(names: Iterable[str]) -> ExtractionResult:
    """Build records keyed by name; the first occurrence wins."""
    dependencies: Dict[str, DependencyRecord] = {}
    for name in names:
        if name not in dependencies:
            dependencies[name] = DependencyRecord(name=name)
    return list(dependencies.values())


def csproj_dependencies_stats(csproj: Element) -> ExtractionResult:
    """Dependencies declared as ``ItemGroup/PackageReference`` in a .csproj.

    Only direct ``ItemGroup`` children of the root are read. References
    without an ``Include`` attribute (e.g. ``Update=``) are skipped; an empty
    ``Include`` is kept as a name.
    """
    names = (
        package_ref.get("Include")
        for item_group in csproj.findall("ItemGroup")
        for package_ref in item_group.findall("PackageReference")
    )
    return _collect(name for name in names if name is not None)


def packages_config_dependencies_stats(packages_config: Element) -> ExtractionResult:
    """Dependencies declared as ``package`` elements in a packages.config.

    Elements with a missing or empty ``id`` are ignored.
    """
    names = (package.get("id") for package in packages_config.findall("package"))
    return _collect(name for name in names if name)


def aggregate_dependencies(
    a: ExtractionResult, b: ExtractionResult
) -> ExtractionResult:
    """Append records from ``b`` whose name is not already in ``a``."""
    seen = {dep.name for dep in a}
    return a + [dep for dep in b if dep.name not in seen]


def dependencies_stats(file: Any) -> ExtractionResult:
    """Extract dependencies from a single already-fetched manifest.

    Args:
        file: Object or mapping with ``name`` and ``text``.

    Returns:
        Dependency records; empty for unknown file names or unparseable text.
    """
    name = _file_name(file)
    text = file.get("text") if isinstance(file, dict) else getattr(file, "text", None)

    if name == Constants.PACKAGES_CONFIG_FILE:
        xml = parse_xml(text)
        if xml is not None:
            return packages_config_dependencies_stats(xml)
    if Constants.CSPROJ_EXTENSION in name:
        xml = parse_xml(text)
        if xml is not None:
            return csproj_dependencies_stats(xml)
    return []
