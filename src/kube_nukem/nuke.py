"""
The nuke pipeline: delete a CRD and unstick whatever of its kind remains.

For one CRD name, nuke() fetches the CRD, deletes it, strips finalizers from
every instance still around (their controller is usually gone, so nothing
else will), and finally waits for the CRD itself to disappear.
"""

from __future__ import annotations

import enum
import time
from typing import Optional

from .config import POLL_INTERVAL, POLL_TIMEOUT
from .errors import KubectlError, NotFoundError, NukeError
from .kubectl import KubectlClient
from .logs import FieldLogger
from .patch import create_merge_patch
from .resources import CustomResourceDefinition, GenericResource, get_api_version, kubectl_resource
from .signals import CancelToken


class WaitResult(enum.Enum):
    CONVERGED = "converged"
    WARNED_STUCK = "warned-stuck"


def nuke(
    cancel: CancelToken,
    log: FieldLogger,
    client: KubectlClient,
    crd_name: str,
    poll_interval: float = POLL_INTERVAL,
    poll_timeout: float = POLL_TIMEOUT,
    tolerate_not_found: bool = True,
) -> None:
    """
    Delete the CRD `crd_name` and clear finalizers on its remaining instances.

    A CRD that does not exist is not an error. The CRD still existing once
    the poll window has passed is logged as a warning, not an error.

    Raises:
        NukeError: naming the phase (and resource) that failed.
        NoServedVersionError: if the CRD has no served version to sweep.
        CancelledError: if the token fires.
    """
    log.info("Nuking…")

    try:
        crd = client.get_crd(cancel, crd_name)
    except NotFoundError:
        log.debug("CRD does not exist.")
        return
    except KubectlError as exc:
        raise NukeError(f"failed to retrieve CRD: {exc}") from exc

    # Deleting first gets rid of every CR without finalizers, less work for the sweep.
    try:
        client.delete_crd(cancel, crd_name)
    except KubectlError as exc:
        raise NukeError(f"failed to delete CRD resource: {exc}") from exc

    remove_resources(cancel, log, client, crd, tolerate_not_found=tolerate_not_found)

    result = wait_for_removal(cancel, client, crd_name, poll_interval, poll_timeout)
    if result is WaitResult.WARNED_STUCK:
        log.warning("CRD still exists, some resources might be blocked by owner references to them.")


def remove_resources(
    cancel: CancelToken,
    log: FieldLogger,
    client: KubectlClient,
    crd: CustomResourceDefinition,
    tolerate_not_found: bool = True,
) -> int:
    """
    Strip finalizers from every instance of the CRD's kind.

    Namespace-scoped kinds are listed namespace by namespace, cluster-scoped
    ones with a single list call.

    Returns:
        Number of objects patched.

    Raises:
        NoServedVersionError: before any list call, if no version is served.
    """
    api_version = get_api_version(crd)
    resource = kubectl_resource(crd, api_version)
    log.debug(f"Sweeping {crd.kind} ({api_version}).")

    if not crd.namespaced:
        return _remove_in_scope(cancel, log, client, resource, None, tolerate_not_found)

    try:
        namespaces = client.list_namespaces(cancel)
    except NotFoundError as exc:
        if not tolerate_not_found:
            raise NukeError(f"failed to list namespaces: {exc}") from exc
        namespaces = []
    except KubectlError as exc:
        raise NukeError(f"failed to list namespaces: {exc}") from exc

    patched = 0
    for namespace in namespaces:
        log.with_field("namespace", namespace).debug("Sweeping namespace.")
        patched += _remove_in_scope(cancel, log, client, resource, namespace, tolerate_not_found)
    return patched


def _remove_in_scope(
    cancel: CancelToken,
    log: FieldLogger,
    client: KubectlClient,
    resource: str,
    namespace: Optional[str],
    tolerate_not_found: bool,
) -> int:
    try:
        objects = client.list_objects(cancel, resource, namespace)
    except NotFoundError as exc:
        # The type may already be unserved between the CRD delete and now.
        if not tolerate_not_found:
            raise NukeError(f"failed to list objects: {exc}") from exc
        return 0
    except KubectlError as exc:
        raise NukeError(f"failed to list objects: {exc}") from exc

    patched = 0
    for obj in objects:
        # no finalizers means the garbage collector handles it (or an ownerRef blocks it)
        if not obj.finalizers:
            continue
        log.with_field("resource", obj.identity).debug("Nuking…")
        try:
            client.patch_merge(cancel, resource, obj, finalizer_patch(obj))
        except KubectlError as exc:
            raise NukeError(f"failed to delete {obj.identity}: {exc}") from exc
        patched += 1
    return patched


def finalizer_patch(obj: GenericResource) -> dict:
    """Merge patch that clears the finalizers of `obj` and touches nothing else."""
    cleared = obj.deep_copy()
    cleared.finalizers = None
    return create_merge_patch(obj.obj, cleared.obj)


def wait_for_removal(
    cancel: CancelToken,
    client: KubectlClient,
    crd_name: str,
    interval: float = POLL_INTERVAL,
    timeout: float = POLL_TIMEOUT,
) -> WaitResult:
    """
    Poll until the CRD is gone or `timeout` seconds have passed.

    The first check happens immediately. Errors other than not-found end the
    wait with a NukeError.
    """
    deadline = time.monotonic() + timeout
    while True:
        try:
            client.get_crd(cancel, crd_name)
        except NotFoundError:
            return WaitResult.CONVERGED
        except KubectlError as exc:
            raise NukeError(f"failed to check final CRD existence: {exc}") from exc

        if time.monotonic() + interval > deadline:
            return WaitResult.WARNED_STUCK
        cancel.sleep(interval)
