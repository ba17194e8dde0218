"""Shared fixtures: an in-memory cluster standing in for KubectlClient."""

import copy
import logging

import pytest

from kube_nukem.errors import KubectlError, NotFoundError
from kube_nukem.logs import FieldLogger
from kube_nukem.resources import CustomResourceDefinition, GenericResource
from kube_nukem.signals import CancelToken


def apply_merge_patch(target, patch):
    """Apply an RFC 7386 merge patch the way the API server does; inputs are not mutated."""
    if not isinstance(patch, dict):
        return patch
    result = dict(target) if isinstance(target, dict) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = apply_merge_patch(result.get(key), value)
    return result


def make_crd(
    name="foos.example.com",
    group="example.com",
    kind="Foo",
    plural="foos",
    scope="Namespaced",
    versions=(("v1", True),),
):
    """Raw CRD document as `kubectl get crd -o json` returns it."""
    return {
        "apiVersion": "apiextensions.k8s.io/v1",
        "kind": "CustomResourceDefinition",
        "metadata": {"name": name},
        "spec": {
            "group": group,
            "names": {"kind": kind, "plural": plural},
            "scope": scope,
            "versions": [{"name": v, "served": served, "storage": False} for v, served in versions],
        },
    }


def make_object(name, namespace=None, finalizers=None, kind="Foo", api_version="example.com/v1", **extra):
    meta = {"name": name}
    if namespace:
        meta["namespace"] = namespace
    if finalizers is not None:
        meta["finalizers"] = list(finalizers)
    obj = {"apiVersion": api_version, "kind": kind, "metadata": meta}
    obj.update(extra)
    return obj


class FakeCluster:
    """
    Records every call and serves CRDs, namespaces and objects from dicts.

    objects maps a kubectl resource ("foos.v1.example.com") to raw objects;
    listing a resource that is not in the map raises NotFoundError.
    failures maps a call key (e.g. ("list_objects", "ns1")) to the
    exception that call raises.
    """

    def __init__(self, crds=None, namespaces=None, objects=None, delete_removes_crd=True):
        self.crds = {c["metadata"]["name"]: c for c in crds or []}
        self.namespaces = list(namespaces or [])
        self.objects = {k: [copy.deepcopy(o) for o in v] for k, v in (objects or {}).items()}
        self.delete_removes_crd = delete_removes_crd
        self.failures = {}
        self.calls = []
        self.patches = []

    def _fail(self, key):
        exc = self.failures.get(key)
        if exc is not None:
            raise exc

    def get_crd(self, cancel, name):
        cancel.raise_if_cancelled()
        self.calls.append(("get_crd", name))
        self._fail(("get_crd", name))
        if name not in self.crds:
            raise NotFoundError(["kubectl", "get"], 1, f'Error from server (NotFound): "{name}" not found')
        return CustomResourceDefinition.from_dict(self.crds[name])

    def delete_crd(self, cancel, name):
        self.calls.append(("delete_crd", name))
        self._fail(("delete_crd", name))
        if self.delete_removes_crd:
            self.crds.pop(name, None)

    def list_namespaces(self, cancel):
        self.calls.append(("list_namespaces",))
        self._fail(("list_namespaces",))
        return list(self.namespaces)

    def list_objects(self, cancel, resource, namespace=None):
        self.calls.append(("list_objects", resource, namespace))
        self._fail(("list_objects", namespace))
        if resource not in self.objects:
            raise NotFoundError(["kubectl", "get"], 1, f'error: the server doesn\'t have a resource type "{resource}"')
        return [
            GenericResource(copy.deepcopy(o))
            for o in self.objects[resource]
            if namespace is None or o["metadata"].get("namespace") == namespace
        ]

    def patch_merge(self, cancel, resource, obj, patch):
        self.calls.append(("patch_merge", resource, obj.identity))
        self.patches.append((obj.identity, patch))
        self._fail(("patch_merge", obj.identity))
        items = self.objects[resource]
        for i, stored in enumerate(items):
            ref = GenericResource(stored)
            if ref.name == obj.name and ref.namespace == obj.namespace:
                items[i] = apply_merge_patch(stored, patch)
                return
        raise NotFoundError(["kubectl", "patch"], 1, "Error from server (NotFound)")

    def stored(self, resource, identity):
        for o in self.objects[resource]:
            if GenericResource(o).identity == identity:
                return o
        return None

    def calls_named(self, name):
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def cancel():
    return CancelToken()


@pytest.fixture
def log():
    return FieldLogger(logging.getLogger("nukem-tests"))


def api_error(message="Error from server (InternalError): etcdserver: request timed out"):
    return KubectlError(["kubectl"], 1, message)
