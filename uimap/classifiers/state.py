"""State-management module classification."""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Set, Tuple

from ..models import EntityKind, StoreInfo
from ..router import RouterInfo
from .base import Classification, Classifier, SourceFile, export_names, module_stem

# (store type, import packages, calls that mark the module as a store)
_STORE_MARKERS: Tuple[Tuple[str, Sequence[str], Set[str]], ...] = (
    ("redux", ("@reduxjs/toolkit", "redux"), {"createSlice", "configureStore", "createStore", "combineReducers"}),
    ("zustand", ("zustand",), {"create", "createStore"}),
    ("jotai", ("jotai",), {"atom", "atomWithStorage", "atomFamily"}),
    ("recoil", ("recoil",), {"atom", "selector", "atomFamily", "selectorFamily"}),
    ("mobx", ("mobx",), {"makeObservable", "makeAutoObservable", "observable"}),
    ("valtio", ("valtio",), {"proxy"}),
)


class StoreClassifier(Classifier):
    """Detects redux, zustand, jotai, recoil, mobx and valtio stores."""

    kind = EntityKind.STORE

    def classify(self, source: SourceFile, router: RouterInfo) -> Optional[Classification]:
        store_type = detect_store_type(source)
        if store_type is None:
            return None
        exports = export_names(source.module)
        store = StoreInfo(
            name=exports[0] if exports else module_stem(source.path),
            file_name=source.file_name,
            file_path=str(source.path),
            type=store_type,
            exports=exports,
        )
        return Classification(kind=EntityKind.STORE, source=source, entities=[store])


def detect_store_type(source: SourceFile) -> Optional[str]:
    module = source.module
    imported: Dict[str, str] = {}
    for binding in module.imports:
        package = _package_name(binding.source)
        imported[binding.local] = package
    callees = {call.callee for call in module.calls}
    for store_type, packages, markers in _STORE_MARKERS:
        for callee in callees:
            head = callee.split(".")[0]
            if imported.get(head) in packages and (callee.split(".")[-1] in markers or head in markers):
                return store_type
    return None


def _package_name(specifier: str) -> str:
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


__all__ = ["StoreClassifier", "detect_store_type"]
