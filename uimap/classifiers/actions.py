"""Server action module classification."""

from __future__ import annotations

from typing import Optional

from ..models import EntityKind, ServerActionFile
from ..router import RouterInfo
from .base import Classification, Classifier, SourceFile


class ServerActionClassifier(Classifier):
    """Matches modules opening with the ``"use server"`` directive."""

    kind = EntityKind.SERVER_ACTION

    def classify(self, source: SourceFile, router: RouterInfo) -> Optional[Classification]:
        module = source.module
        if not module.is_server:
            return None
        functions = [declaration.name for declaration in module.exported_declarations() if declaration.is_function]
        default = module.default_declaration
        if default is not None and default.is_function and default.name not in functions:
            functions.append(module.default_export or default.name)
        info = ServerActionFile(
            file_path=str(source.path),
            relative_path=source.relative_path,
            exported_functions=tuple(functions),
        )
        return Classification(kind=EntityKind.SERVER_ACTION, source=source, entities=[info])


__all__ = ["ServerActionClassifier"]
