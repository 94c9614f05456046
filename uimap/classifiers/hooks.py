"""Custom hook classification."""

from __future__ import annotations

from typing import List, Optional

from ..models import EntityKind, HookInfo
from ..router import RouterInfo
from ..syntax import Declaration
from .base import Classification, Classifier, SourceFile, declares_context, is_hook_name


class HookClassifier(Classifier):
    """Emits one HookInfo per exported ``use[A-Z]`` function.

    Files that also create a React context are left to the context
    classifier, which reports their hooks alongside the context.
    """

    kind = EntityKind.HOOK

    def classify(self, source: SourceFile, router: RouterInfo) -> Optional[Classification]:
        if declares_context(source.module):
            return None
        hooks = hook_infos(source)
        if not hooks:
            return None
        return Classification(kind=EntityKind.HOOK, source=source, entities=hooks)


def hook_infos(source: SourceFile) -> List[HookInfo]:
    module = source.module
    candidates: List[Declaration] = list(module.exported_declarations())
    default = module.default_declaration
    if default is not None and default not in candidates:
        candidates.append(default)
    return [
        HookInfo(name=declaration.name, file_name=source.file_name, file_path=str(source.path))
        for declaration in candidates
        if _is_hook(declaration)
    ]


def _is_hook(declaration: Declaration) -> bool:
    # Factory results such as zustand's ``create(...)`` are stores, not hooks.
    return (
        is_hook_name(declaration.name)
        and declaration.is_function
        and declaration.initializer_call is None
    )


__all__ = ["HookClassifier", "hook_infos"]
