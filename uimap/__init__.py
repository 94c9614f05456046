"""Static UI-architecture scanner for React, Next.js and Vite projects."""

from .errors import ProjectNotFoundError, UimapError
from .models import (
    ComponentInfo,
    ContextInfo,
    DataDependency,
    HookInfo,
    PageInfo,
    ScanResult,
    UtilityInfo,
)
from .scanner import ProjectScanner
from .session import ScanSession, scan_project

__all__ = [
    "ComponentInfo",
    "ContextInfo",
    "DataDependency",
    "HookInfo",
    "PageInfo",
    "ProjectNotFoundError",
    "ProjectScanner",
    "ScanResult",
    "ScanSession",
    "UimapError",
    "UtilityInfo",
    "scan_project",
]
