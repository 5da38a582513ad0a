"""
GKE Module Functions
Creates the GKE control plane for the selected variant
Node pools are attached separately using this module's outputs
"""

import pulumi
import pulumi_gcp as gcp
from typing import Dict, Any

LOGGING_SERVICE = "logging.googleapis.com/kubernetes"
MONITORING_SERVICE = "monitoring.googleapis.com/kubernetes"


def workload_pool(project: str) -> str:
    """Workload identity pool for the project"""
    return f"{project}.svc.id.goog"


def cluster_args(spec, variant, dataset_id) -> Dict[str, Any]:
    """
    Build the cluster arguments for one variant

    Args:
        spec: Validated ClusterSpec
        variant: Selected variant
        dataset_id: Usage metering dataset id

    Returns:
        Keyword arguments for gcp.container.Cluster
    """
    args = {
        "name": spec.cluster_name,
        "location": spec.cluster_location,
        "project": spec.project,
        "network": "default",
        # The default pool is removed right after creation; node pools live elsewhere
        "initial_node_count": 1,
        "remove_default_node_pool": True,
        "master_auth": {
            "client_certificate_config": {
                "issue_client_certificate": False,
            },
        },
        "authenticator_groups_config": {
            "security_group": spec.security_group,
        },
        "workload_identity_config": {
            "workload_pool": workload_pool(spec.project),
        },
        "logging_service": LOGGING_SERVICE,
        "monitoring_service": MONITORING_SERVICE,
        "maintenance_policy": {
            "daily_maintenance_window": {
                "start_time": spec.maintenance_start_time,
            },
        },
        # No CIDR blocks: the control plane endpoint is closed to external networks
        "master_authorized_networks_config": {},
        "resource_usage_export_config": {
            "enable_network_egress_metering": True,
            "bigquery_destination": {
                "dataset_id": dataset_id,
            },
        },
        "network_policy": {
            "enabled": True,
            "provider": "CALICO",
        },
        "addons_config": {
            "horizontal_pod_autoscaling": {"disabled": False},
            "http_load_balancing": {"disabled": False},
            "network_policy_config": {"disabled": False},
        },
        # TODO: replace with Pod Security Admission labels on namespaces
        "pod_security_policy_config": {
            "enabled": False,
        },
        "vertical_pod_autoscaling": {
            "enabled": True,
        },
        "resource_labels": spec.common_labels,
        "deletion_protection": variant.destruction_protected,
    }

    if variant.release_channel:
        args["release_channel"] = {"channel": variant.release_channel}

    return args


def create_cluster(spec, variant, dataset_id: 'pulumi.Output[str]') -> Dict[str, Any]:
    """
    Create the GKE cluster for the selected variant

    Args:
        spec: Validated ClusterSpec
        variant: Selected variant
        dataset_id: Usage metering dataset id

    Returns:
        Dict with cluster resource and outputs
    """
    args = cluster_args(spec, variant, dataset_id)

    cluster = gcp.container.Cluster(
        f"{spec.cluster_name}-cluster-{variant.name}",
        **args
    )

    pulumi.log.info(
        f"GKE cluster {spec.cluster_name} declared in {spec.cluster_location} for the "
        f"{variant.name} variant (deletion protection: {variant.destruction_protected}, "
        f"release channel: {variant.release_channel or 'provider default'})"
    )

    return {
        "cluster_name": cluster.name,
        "cluster_location": cluster.location,
        "cluster_id": cluster.id,
        "cluster_endpoint": cluster.endpoint,
        "variant": variant.name,
        "_cluster": cluster,
    }
