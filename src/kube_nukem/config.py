"""
Constants for kube-nukem.

Defines the kubectl resource names, timeouts and logging format used by
the nuke pipeline and the CLI.
"""

# Fully qualified so a CRD that happens to be named like a core kind can't shadow it.
CRD_RESOURCE = "customresourcedefinitions.apiextensions.k8s.io"
NAMESPACE_RESOURCE = "namespaces"

# CRD scopes as written in spec.scope.
SCOPE_NAMESPACED = "Namespaced"
SCOPE_CLUSTER = "Cluster"

# Convergence wait after deletion + sweep (seconds).
POLL_INTERVAL = 0.1
POLL_TIMEOUT = 5.0

# Upper bound for a single kubectl call (seconds).
KUBECTL_TIMEOUT = 60

# How often a running kubectl child is checked for cancellation (seconds).
KUBECTL_CANCEL_CHECK = 0.1

KUBECTL_BIN = "kubectl"
KUBECONFIG_ENV = "KUBECONFIG"

# kubectl stderr fragments meaning the object or the resource type is gone.
NOT_FOUND_MARKERS = (
    "(NotFound)",
    "the server doesn't have a resource type",
    "the server could not find the requested resource",
)

# Full timestamp, RFC 1123 style (Mon, 02 Jan 2006 15:04:05 MST).
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(message)s"
LOG_DATE_FORMAT = "%a, %d %b %Y %H:%M:%S %Z"
