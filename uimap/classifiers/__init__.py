"""Entity classifier chain and discovery utilities."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from ..errors import ClassificationAmbiguous
from ..logging import get_logger
from ..models import EntityKind, ScanWarning
from ..router import RouterInfo
from .actions import ServerActionClassifier
from .base import Classification, Classifier, SourceFile
from .components import ComponentClassifier
from .contexts import ContextClassifier
from .hooks import HookClassifier
from .pages import RouteFileClassifier
from .state import StoreClassifier
from .utilities import UtilityClassifier

logger = get_logger("classifier")

# Precedence order: the first classifier returning a result wins.
_BUILTIN_FACTORIES: dict[str, Callable[[], Classifier]] = {
    "routes": RouteFileClassifier,
    "hooks": HookClassifier,
    "contexts": ContextClassifier,
    "components": ComponentClassifier,
    "server-actions": ServerActionClassifier,
    "stores": StoreClassifier,
    "utilities": UtilityClassifier,
}


def discover_classifiers(enabled: Sequence[str] | None = None) -> List[Classifier]:
    """Return instantiated classifiers in precedence order, honoring optional names."""
    enabled_set = {name.lower() for name in enabled} if enabled is not None else None
    classifiers: List[Classifier] = []
    for name, factory in _BUILTIN_FACTORIES.items():
        if enabled_set is not None and name not in enabled_set:
            continue
        instance = factory()
        if not isinstance(instance, Classifier):
            raise TypeError(f"Classifier factory for '{name}' did not return a Classifier instance")
        classifiers.append(instance)
        if enabled_set is not None:
            enabled_set.discard(name)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown classifiers requested: {missing}")
    return classifiers


class EntityClassifier:
    """Runs the precedence chain for one file; never raises for a single file."""

    def __init__(self, router: RouterInfo, classifiers: Optional[Sequence[Classifier]] = None) -> None:
        self.router = router
        self._classifiers = list(classifiers) if classifiers is not None else discover_classifiers()

    def classify(self, source: SourceFile) -> Classification:
        for classifier in self._classifiers:
            try:
                result = classifier.classify(source, self.router)
            except Exception as exc:  # one malformed file must not abort the scan
                logger.warning("Classifier %s failed on %s: %s", type(classifier).__name__, source.relative_path, exc)
                return _skipped(source, ClassificationAmbiguous(source.relative_path, str(exc)))
            if result is not None:
                return result
        error = ClassificationAmbiguous(source.relative_path)
        logger.debug("%s", error)
        return _skipped(source, error)


def _skipped(source: SourceFile, error: ClassificationAmbiguous) -> Classification:
    warning = ScanWarning(kind="classification", message=str(error), path=source.relative_path)
    return Classification(kind=EntityKind.SKIPPED, source=source, warnings=[warning])


__all__ = [
    "Classification",
    "Classifier",
    "EntityClassifier",
    "SourceFile",
    "discover_classifiers",
]
