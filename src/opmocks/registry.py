import copy
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from opmocks.shapes import FactoryRef, GeneratedArtifact


def deep_merge(base: Any, overrides: Any) -> Any:
    """Deep-merge ``overrides`` into a copy of ``base``.

    Mappings merge key by key. Lists and scalars in ``overrides`` replace the
    base value, so overriding a list never keeps trailing base elements.
    Neither argument is modified.
    """
    if overrides is None:
        return copy.deepcopy(base)
    if not (isinstance(base, Mapping) and isinstance(overrides, Mapping)):
        return copy.deepcopy(overrides)

    merged = {key: copy.deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        merged[key] = deep_merge(merged[key], value) if key in merged else copy.deepcopy(value)
    return merged


class ArtifactRegistry:
    """Looks up generated artifacts and builds plain sample values from them.

    Artifacts can be addressed by type name or factory name.
    """

    def __init__(self, artifacts: Iterable[GeneratedArtifact]):
        self._artifacts: dict[str, GeneratedArtifact] = {}
        self._by_factory: dict[str, GeneratedArtifact] = {}
        for artifact in artifacts:
            self._artifacts.setdefault(artifact.name, artifact)
            self._by_factory.setdefault(artifact.factory_name, artifact)

    def __iter__(self) -> Iterator[GeneratedArtifact]:
        return iter(self._artifacts.values())

    def __len__(self) -> int:
        return len(self._artifacts)

    def __contains__(self, name: object) -> bool:
        return name in self._artifacts or name in self._by_factory

    def get(self, name: str) -> GeneratedArtifact:
        """Return the artifact with the given type or factory name.

        Raises:
            KeyError: If no artifact has that name
        """
        if name in self._artifacts:
            return self._artifacts[name]
        if name in self._by_factory:
            return self._by_factory[name]
        raise KeyError(f"No generated artifact named '{name}'")

    def materialize(self, name: str) -> dict[str, Any]:
        """Return the sample value of an artifact with every factory reference resolved."""
        return self._resolve(self.get(name).value)

    def build(self, name: str, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Materialize an artifact and deep-merge ``overrides`` into it."""
        return deep_merge(self.materialize(name), overrides)

    def _resolve(self, value: Any) -> Any:
        if isinstance(value, FactoryRef):
            return self.materialize(value.factory_name)
        if isinstance(value, dict):
            return {key: self._resolve(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._resolve(item) for item in value]
        return copy.deepcopy(value)
