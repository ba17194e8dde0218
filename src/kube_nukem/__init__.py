"""
kube_nukem: Remove CRDs and the custom resources stuck behind their finalizers.

Deletes each given CustomResourceDefinition, clears metadata.finalizers on
every remaining instance of its kind (the controller that would have
processed them is usually gone), then waits for the CRD to disappear.
"""

__version__ = "0.1.0"
