"""
GKE Module
Cluster control plane for the selected variant
"""

from .functions import create_cluster, cluster_args

__all__ = ["create_cluster", "cluster_args"]
