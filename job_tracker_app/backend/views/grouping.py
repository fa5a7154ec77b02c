"""
Flat and by-section projections of an application list.

The input list arrives already ordered (date applied, newest first) and that
order is kept inside every group. Switching views never refetches or
re-sorts the underlying list.
"""
import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

UNSECTIONED_LABEL = "Unsectioned"


class ViewMode(str, Enum):
    ALL = "all"
    BY_SECTION = "by-section"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ViewMode":
        try:
            return cls(value)
        except ValueError:
            return cls.ALL

    def toggled(self) -> "ViewMode":
        return ViewMode.BY_SECTION if self is ViewMode.ALL else ViewMode.ALL


@dataclass
class ApplicationGroup:
    name: str
    applications: List[Any] = field(default_factory=list)
    is_unsectioned: bool = False

    @property
    def count(self) -> int:
        return len(self.applications)


@dataclass
class ListView:
    mode: ViewMode
    applications: List[Any]
    groups: Optional[List[ApplicationGroup]] = None


def section_name_of(application: Any) -> Optional[str]:
    """Joined section name of an ORM row or a serialized dict."""
    if isinstance(application, dict):
        return application.get("section_name")
    return getattr(application, "section_name", None)


def collation_key(name: str):
    """Case- and accent-insensitive ordering, ties broken by the raw name."""
    decomposed = unicodedata.normalize("NFKD", name.casefold())
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base, name)


def group_by_section(
    applications: Sequence[Any],
    key: Callable[[Any], Optional[str]] = section_name_of,
) -> List[ApplicationGroup]:
    """
    Partition applications by section name.

    Named groups are sorted alphabetically; applications without a section
    form a trailing "Unsectioned" group that only exists when non-empty.
    """
    named: Dict[str, ApplicationGroup] = {}
    unsectioned = ApplicationGroup(name=UNSECTIONED_LABEL, is_unsectioned=True)

    for application in applications:
        name = key(application)
        if name is None:
            unsectioned.applications.append(application)
            continue
        if name not in named:
            named[name] = ApplicationGroup(name=name)
        named[name].applications.append(application)

    groups = [named[name] for name in sorted(named, key=collation_key)]
    if unsectioned.applications:
        groups.append(unsectioned)
    return groups


def project(applications: Sequence[Any], mode: ViewMode) -> ListView:
    items = list(applications)
    if mode is ViewMode.BY_SECTION:
        return ListView(mode=mode, applications=items, groups=group_by_section(items))
    return ListView(mode=mode, applications=items)
