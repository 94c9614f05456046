"""React context classification."""

from __future__ import annotations

from typing import Any, List, Optional

from ..models import ContextInfo, EntityKind
from ..router import RouterInfo
from .base import CONTEXT_FACTORIES, Classification, Classifier, SourceFile
from .hooks import hook_infos


class ContextClassifier(Classifier):
    """Pairs each ``createContext`` value with its provider component.

    Hooks exported from the same file, such as ``useTheme`` next to
    ``ThemeContext``, are reported as HookInfo entities of this file.
    """

    kind = EntityKind.CONTEXT

    def classify(self, source: SourceFile, router: RouterInfo) -> Optional[Classification]:
        declarations = source.module.declarations
        contexts = [
            declaration.name
            for declaration in declarations.values()
            if declaration.initializer_call in CONTEXT_FACTORIES
        ]
        if not contexts:
            return None

        providers = [name for name in declarations if name.endswith("Provider") and name != "Provider"]
        infos: List[Any] = []
        for name in contexts:
            infos.append(
                ContextInfo(
                    name=name,
                    provider_name=_provider_for(name, providers),
                    file_name=source.file_name,
                    file_path=str(source.path),
                )
            )
        infos.extend(hook_infos(source))
        return Classification(kind=EntityKind.CONTEXT, source=source, entities=infos)


def _provider_for(context_name: str, providers: List[str]) -> str:
    base = context_name[: -len("Context")] if context_name.endswith("Context") else context_name
    preferred = f"{base}Provider"
    if preferred in providers:
        return preferred
    if providers:
        return providers[0]
    return f"{context_name}Provider"


__all__ = ["ContextClassifier"]
