"""
Pulumi modules for the GKE usage-metering cluster
Function-based builders, one concern per module
"""

from .iam import create_node_identity
from .usage_metering import create_usage_sink
from .gke import create_cluster

__all__ = [
    "create_node_identity",
    "create_usage_sink",
    "create_cluster",
]
