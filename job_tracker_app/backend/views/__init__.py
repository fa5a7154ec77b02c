from .grouping import UNSECTIONED_LABEL, ApplicationGroup, ListView, ViewMode, group_by_section, project
from .list_surface import DrawerMode, InvalidTransition, ListSurface, SurfaceState
from .optimistic import InlineRename, OptimisticValue, Phase

__all__ = [
    "UNSECTIONED_LABEL",
    "ApplicationGroup",
    "ListView",
    "ViewMode",
    "group_by_section",
    "project",
    "DrawerMode",
    "InvalidTransition",
    "ListSurface",
    "SurfaceState",
    "InlineRename",
    "OptimisticValue",
    "Phase",
]
