"""
Kubectl invocation and the cluster client used by the nuke pipeline.

All cluster access goes through subprocess kubectl calls. run_kubectl()
runs one call and honours the cancellation token; KubectlClient turns the
handful of calls kube-nukem needs into methods that return decoded JSON
and raise NotFoundError / KubectlError on failure.
"""

from __future__ import annotations

import json
import subprocess
import time
from typing import Optional

from .config import (
    CRD_RESOURCE,
    KUBECTL_BIN,
    KUBECTL_CANCEL_CHECK,
    KUBECTL_TIMEOUT,
    NAMESPACE_RESOURCE,
    NOT_FOUND_MARKERS,
)
from .errors import KubectlError, NotFoundError
from .resources import CustomResourceDefinition, GenericResource, items_of
from .signals import CancelToken


def run_kubectl(
    args: list[str],
    cancel: CancelToken,
    timeout: float = KUBECTL_TIMEOUT,
) -> subprocess.CompletedProcess:
    """
    Run kubectl with the given args.

    Args:
        args: List of arguments (e.g. ["get", "namespaces", "-o", "json"]).
        cancel: Token checked while the child runs; the child is killed on cancel.
        timeout: Seconds before the child is killed and KubectlError raised.

    Returns:
        CompletedProcess with returncode, stdout, stderr.

    Raises:
        CancelledError: if the token fires before or during the call.
        KubectlError: if kubectl is missing or times out.
    """
    cancel.raise_if_cancelled()
    cmd = [KUBECTL_BIN] + args
    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError as exc:
        raise KubectlError(cmd, None, f"{KUBECTL_BIN} not found: {exc}") from exc

    deadline = time.monotonic() + timeout
    try:
        while True:
            try:
                stdout, stderr = proc.communicate(timeout=KUBECTL_CANCEL_CHECK)
                break
            except subprocess.TimeoutExpired:
                if cancel.cancelled or time.monotonic() >= deadline:
                    proc.kill()
                    proc.communicate()
                    cancel.raise_if_cancelled()
                    raise KubectlError(cmd, None, f"timed out after {timeout}s")
    finally:
        # SystemExit from a second signal lands here with the child still running
        if proc.returncode is None:
            proc.kill()
            proc.wait()
    return subprocess.CompletedProcess(cmd, proc.returncode, stdout, stderr)


def is_not_found(stderr: str) -> bool:
    """True if kubectl's stderr says the object or resource type does not exist."""
    return any(marker in stderr for marker in NOT_FOUND_MARKERS)


class KubectlClient:
    """
    The cluster operations kube-nukem needs, on top of kubectl.

    Global flags (--kubeconfig, --context) are prepended to every call.
    """

    def __init__(self, kubeconfig: Optional[str] = None, context: Optional[str] = None) -> None:
        self.global_args: list[str] = []
        if kubeconfig:
            self.global_args.extend(["--kubeconfig", kubeconfig])
        if context:
            self.global_args.extend(["--context", context])

    def _run(self, cancel: CancelToken, args: list[str]) -> str:
        result = run_kubectl(self.global_args + args, cancel)
        if result.returncode != 0:
            stderr = result.stderr or ""
            if is_not_found(stderr):
                raise NotFoundError(result.args, result.returncode, stderr)
            raise KubectlError(result.args, result.returncode, stderr)
        return result.stdout or ""

    def _run_json(self, cancel: CancelToken, args: list[str]) -> dict:
        stdout = self._run(cancel, args + ["-o", "json"])
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as exc:
            raise KubectlError(
                [KUBECTL_BIN] + self.global_args + args, 0, f"invalid JSON from kubectl: {exc}"
            ) from exc

    def get_crd(self, cancel: CancelToken, name: str) -> CustomResourceDefinition:
        """Fetch a CRD by name; raises NotFoundError if it does not exist."""
        return CustomResourceDefinition.from_dict(self._run_json(cancel, ["get", CRD_RESOURCE, name]))

    def delete_crd(self, cancel: CancelToken, name: str) -> None:
        """Request deletion of a CRD without waiting for it to go away."""
        self._run(cancel, ["delete", CRD_RESOURCE, name, "--wait=false"])

    def list_namespaces(self, cancel: CancelToken) -> list[str]:
        return [ns.name for ns in items_of(self._run_json(cancel, ["get", NAMESPACE_RESOURCE]))]

    def list_objects(
        self,
        cancel: CancelToken,
        resource: str,
        namespace: Optional[str] = None,
    ) -> list[GenericResource]:
        """
        List all objects of `resource` (e.g. "foos.v1.example.com").

        With a namespace the list is restricted to it; without one no -n is
        passed, which is what cluster-scoped kinds need.
        """
        args = ["get", resource]
        if namespace:
            args.extend(["-n", namespace])
        return items_of(self._run_json(cancel, args))

    def patch_merge(
        self,
        cancel: CancelToken,
        resource: str,
        obj: GenericResource,
        patch: dict,
    ) -> None:
        """Send `patch` as a JSON merge patch against `obj`."""
        args = ["patch", resource, obj.name]
        if obj.namespace:
            args.extend(["-n", obj.namespace])
        args.extend(["--type=merge", "-p", json.dumps(patch, separators=(",", ":"))])
        self._run(cancel, args)
