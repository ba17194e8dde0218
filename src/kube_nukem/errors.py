"""Exception types raised by kube-nukem."""

from __future__ import annotations

from typing import Optional


class NukemError(Exception):
    """Base class for all kube-nukem errors."""


class KubectlError(NukemError):
    """A kubectl call failed (transport problem or API error)."""

    def __init__(self, command: list[str], returncode: Optional[int], stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(self.stderr or f"kubectl exited with status {returncode}")

    def __repr__(self) -> str:
        return "%s(command=%r, returncode=%r, stderr=%r)" % (
            self.__class__.__name__,
            self.command,
            self.returncode,
            self.stderr,
        )


class NotFoundError(KubectlError):
    """The addressed object, or its whole resource type, does not exist."""


class NoServedVersionError(NukemError):
    """The CRD has no version marked as served."""

    def __init__(self, crd_name: str) -> None:
        self.crd_name = crd_name
        super().__init__("CRD has no version marked as `served`")


class NukeError(NukemError):
    """A target could not be nuked; the message names the failing phase."""


class CancelledError(NukemError):
    """The operation was interrupted by a signal."""
