"""Component classification and prop extraction."""

from __future__ import annotations

from typing import List, Optional

from ..models import ComponentInfo, EntityKind, PropInfo
from ..router import RouterInfo
from ..syntax import Declaration, ParsedModule
from .base import Classification, Classifier, SourceFile, export_names, primary_component


class ComponentClassifier(Classifier):
    """Recognises a default or primary export that renders JSX."""

    kind = EntityKind.COMPONENT

    def classify(self, source: SourceFile, router: RouterInfo) -> Optional[Classification]:
        found = primary_component(source.module, source.path)
        if found is None:
            return None
        name, declaration = found
        component = ComponentInfo(
            name=name,
            file_name=source.file_name,
            file_path=str(source.path),
            is_client_component=source.module.is_client,
            props=tuple(component_props(source.module, name, declaration)),
            exports=export_names(source.module),
        )
        return Classification(kind=EntityKind.COMPONENT, source=source, entities=[component])


def component_props(module: ParsedModule, name: str, declaration: Declaration) -> List[PropInfo]:
    """Props from the component signature, else from ``<Name>Props`` or ``Props``."""
    if declaration.props is not None:
        return list(declaration.props)
    for type_name in (f"{name}Props", "Props"):
        if type_name in module.type_props:
            return list(module.type_props[type_name])
    return []


__all__ = ["ComponentClassifier", "component_props"]
