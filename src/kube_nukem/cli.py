"""
CLI entry point for kube-nukem.

Parses options and CRD names, sets up logging and the cancellation token,
then runs nuke() once per name. Every name is attempted; the exit status is
non-zero if any of them failed.
"""

from __future__ import annotations

import platform
import sys
from typing import Optional

import click

from . import __version__
from .config import KUBECONFIG_ENV, POLL_INTERVAL, POLL_TIMEOUT
from .errors import NukemError
from .kubectl import KubectlClient
from .logs import FieldLogger, configure_logging
from .nuke import nuke
from .signals import setup_signal_handler

# Shown at the bottom of kube-nukem --help / kube-nukem -h
EPILOG = """
Examples:

  kube-nukem foos.example.com                   # Nuke one CRD and its stuck resources
  kube-nukem foos.example.com bars.example.com  # Several CRDs, each attempted
  kube-nukem -v foos.example.com                # Debug logging (one line per resource)
  kube-nukem --kubeconfig ~/.kube/dev foos.example.com
  kube-nukem --timeout 30 foos.example.com      # Wait longer for the CRD to vanish
  kube-nukem -V                                 # Show version info

Removing finalizers skips whatever cleanup their controller would have done.
"""


def version_banner() -> str:
    return f"Kube Nukem {__version__}, built with Python {platform.python_version()}"


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=EPILOG,
)
@click.option(
    "--kubeconfig",
    metavar="PATH",
    help=f"kubeconfig file to use (uses ${KUBECONFIG_ENV} by default)",
)
@click.option(
    "--context",
    "kube_context",
    metavar="NAME",
    help="kubeconfig context to use instead of the current one",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable more verbose logging",
)
@click.option(
    "-V",
    "--version",
    "show_version",
    is_flag=True,
    help="Show version info and exit immediately",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=POLL_TIMEOUT,
    show_default=True,
    help="Seconds to wait for each CRD to disappear after the sweep",
)
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    default=POLL_INTERVAL,
    show_default=True,
    help="Seconds between checks while waiting",
)
@click.option(
    "--strict-list",
    is_flag=True,
    help="Fail when listing namespaces or resources returns NotFound (default: treat as nothing to sweep)",
)
@click.argument("crd_names", nargs=-1, metavar="CRD_NAME...")
def main(
    kubeconfig: Optional[str],
    kube_context: Optional[str],
    verbose: bool,
    show_version: bool,
    timeout: float,
    interval: float,
    strict_list: bool,
    crd_names: tuple[str, ...],
) -> None:
    """
    Delete CRDs and force-remove their resources stuck on finalizers.

    For each CRD_NAME: delete the CRD, clear metadata.finalizers on every
    remaining resource of its kind, then wait for the CRD to go away.
    """
    if show_version:
        click.echo(version_banner())
        return

    log = FieldLogger(configure_logging(verbose))

    if not crd_names:
        log.critical("No CRD names provided.")
        sys.exit(1)

    cancel = setup_signal_handler()
    # without --kubeconfig, kubectl itself falls back to $KUBECONFIG
    client = KubectlClient(
        kubeconfig=kubeconfig,
        context=kube_context,
    )

    failed = 0
    for name in crd_names:
        crd_name = name.lower()
        crd_log = log.with_field("crd", crd_name)
        try:
            nuke(
                cancel,
                crd_log,
                client,
                crd_name,
                poll_interval=interval,
                poll_timeout=timeout,
                tolerate_not_found=not strict_list,
            )
        except NukemError as exc:
            crd_log.error(f"Failed to nuke: {exc}")
            failed += 1
            if cancel.cancelled:
                break

    if failed:
        log.error(f"{failed} of {len(crd_names)} CRD(s) could not be nuked.")
        sys.exit(1)
    log.info("Everything nuked successfully.")


if __name__ == "__main__":
    main()
