"""NuGet manifest parsing: safe XML parsing and manifest file classification."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Optional

from constants import Constants

logger = logging.getLogger(__name__)


def parse_xml(text: Optional[str]) -> Optional[ET.Element]:
    """Parse manifest text into an element tree root.

    Namespace prefixes are removed from tags so that legacy MSBuild files
    (which declare a default namespace) can be queried by local name.

    Args:
        text: Raw XML text.

    Returns:
        Root element, or None when the text is not well-formed XML.
    """
    try:
        root = ET.fromstring((text or "").lstrip("\ufeff"))
    except (ET.ParseError, ValueError) as e:
        logger.warning("Couldn't parse XML document: %s", e)
        return None

    # Remove namespace for easier parsing
    for elem in root.iter():
        if isinstance(elem.tag, str) and "}" in elem.tag:
            elem.tag = elem.tag.split("}", 1)[1]
    return root


def _file_name(file: Any) -> str:
    if isinstance(file, dict):
        return file.get("name") or ""
    return getattr(file, "name", None) or ""


def is_dependency_file(file: Any) -> bool:
    """Whether ``file`` looks like a NuGet manifest.

    ``.csproj`` is a substring test, so ``App.csproj.bak`` also qualifies.
    """
    name = _file_name(file)
    return name == Constants.PACKAGES_CONFIG_FILE or Constants.CSPROJ_EXTENSION in name


def detect_project_name(file: Any) -> Optional[str]:
    """Project name from a ``.csproj`` file name, e.g. ``Foo.csproj`` -> ``Foo``."""
    name = _file_name(file)
    if Constants.CSPROJ_EXTENSION in name:
        return name.replace(Constants.CSPROJ_EXTENSION, "", 1)
    return None
