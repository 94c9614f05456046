"""Fallback classification for modules that only export helpers."""

from __future__ import annotations

from typing import Optional

from ..models import EntityKind, UtilityInfo
from ..router import RouterInfo
from .base import Classification, Classifier, SourceFile, export_names, module_stem


class UtilityClassifier(Classifier):
    kind = EntityKind.UTILITY

    def classify(self, source: SourceFile, router: RouterInfo) -> Optional[Classification]:
        module = source.module
        exports = export_names(module)
        if not exports and not module.has_default_export:
            return None
        utility = UtilityInfo(
            name=module_stem(source.path),
            file_name=source.file_name,
            file_path=str(source.path),
            exports=exports,
        )
        return Classification(kind=EntityKind.UTILITY, source=source, entities=[utility])


__all__ = ["UtilityClassifier"]
