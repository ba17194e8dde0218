"""
Views over the Kubernetes objects kube-nukem works with.

CustomResourceDefinition is parsed from the JSON kubectl returns for a CRD.
GenericResource wraps an arbitrary object of a kind only known at runtime,
keeping the raw dict as the source of truth.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Optional

from .config import SCOPE_NAMESPACED
from .errors import NoServedVersionError


@dataclass(frozen=True)
class CRDVersion:
    name: str
    served: bool


@dataclass
class CustomResourceDefinition:
    name: str
    group: str
    kind: str
    plural: str
    scope: str
    versions: list[CRDVersion] = field(default_factory=list)

    @classmethod
    def from_dict(cls, obj: dict) -> "CustomResourceDefinition":
        """Build a CRD descriptor from `kubectl get crd <name> -o json` output."""
        meta = obj.get("metadata", {})
        spec = obj.get("spec", {})
        names = spec.get("names", {})
        versions = [
            CRDVersion(name=v.get("name", ""), served=bool(v.get("served", False)))
            for v in spec.get("versions") or []
        ]
        return cls(
            name=meta.get("name", ""),
            group=spec.get("group", ""),
            kind=names.get("kind", ""),
            plural=names.get("plural", ""),
            scope=spec.get("scope", ""),
            versions=versions,
        )

    @property
    def namespaced(self) -> bool:
        return self.scope == SCOPE_NAMESPACED


def get_api_version(crd: CustomResourceDefinition) -> str:
    """
    Return "<group>/<version>" for the first served version, in listed order.

    Raises:
        NoServedVersionError: if no version is served.
    """
    for version in crd.versions:
        if version.served:
            return f"{crd.group}/{version.name}"
    raise NoServedVersionError(crd.name)


def kubectl_resource(crd: CustomResourceDefinition, api_version: str) -> str:
    """
    Resource argument kubectl needs to address instances at `api_version`.

    "example.com/v1beta1" for plural "foos" becomes "foos.v1beta1.example.com",
    which pins both the group and the version.
    """
    group, _, version = api_version.rpartition("/")
    return f"{crd.plural}.{version}.{group}"


class GenericResource:
    """An object of any kind, backed by its decoded JSON document."""

    def __init__(self, obj: dict) -> None:
        self.obj = obj

    def __repr__(self) -> str:
        return "<%s %s %s>" % (self.__class__.__name__, self.kind, self.identity)

    def _metadata(self) -> dict:
        return self.obj.setdefault("metadata", {})

    @property
    def api_version(self) -> str:
        return self.obj.get("apiVersion", "")

    @property
    def kind(self) -> str:
        return self.obj.get("kind", "")

    @property
    def name(self) -> str:
        return self.obj.get("metadata", {}).get("name", "")

    @name.setter
    def name(self, value: str) -> None:
        self._metadata()["name"] = value

    @property
    def namespace(self) -> Optional[str]:
        return self.obj.get("metadata", {}).get("namespace") or None

    @namespace.setter
    def namespace(self, value: Optional[str]) -> None:
        if value:
            self._metadata()["namespace"] = value
        else:
            self._metadata().pop("namespace", None)

    @property
    def finalizers(self) -> list[str]:
        return list(self.obj.get("metadata", {}).get("finalizers") or [])

    @finalizers.setter
    def finalizers(self, value: Optional[list[str]]) -> None:
        # Cleared finalizers are dropped from the document, as the API server does.
        if value:
            self._metadata()["finalizers"] = list(value)
        else:
            self._metadata().pop("finalizers", None)

    @property
    def identity(self) -> str:
        """Return "namespace/name" for namespaced objects, bare "name" otherwise."""
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def deep_copy(self) -> "GenericResource":
        return GenericResource(copy.deepcopy(self.obj))


def items_of(obj: Optional[dict]) -> list[GenericResource]:
    """Wrap the items of a List document (kubectl get ... -o json)."""
    if not obj:
        return []
    return [GenericResource(item) for item in obj.get("items") or []]
