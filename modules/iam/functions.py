"""
IAM Module Functions
Creates the node service account and its project role bindings
"""

import pulumi
import pulumi_gcp as gcp
from typing import Dict, Any, Optional

ACCOUNT_ID_MAX_LENGTH = 30

# Least privilege for node VMs; extend only with a deliberate design change
NODE_ROLES = (
    ("log-writer", "roles/logging.logWriter"),
    ("monitoring-viewer", "roles/monitoring.viewer"),
    ("metric-writer", "roles/monitoring.metricWriter"),
)


def node_account_id(cluster_name: str) -> str:
    """
    Derive the service account id for a cluster's nodes

    Args:
        cluster_name: GKE cluster name

    Returns:
        Account id of at most 30 characters
    """
    account_id = f"{cluster_name}-nodes"[:ACCOUNT_ID_MAX_LENGTH]
    return account_id.rstrip("-")


def create_node_service_account(project: str, cluster_name: str,
                                gate: Optional[pulumi.Output] = None) -> Dict[str, Any]:
    """
    Create service account for GKE nodes

    Args:
        project: GCP project id
        cluster_name: GKE cluster name
        gate: Output that must resolve before the account is registered

    Returns:
        Dict with account resource and outputs
    """
    account_id = node_account_id(cluster_name)

    description = f"Identity of worker nodes in GKE cluster {cluster_name}"
    if gate is not None:
        # Registration waits for the gate; everything else hangs off the account email
        description = pulumi.Output.all(gate, description).apply(lambda values: values[1])

    account = gcp.serviceaccount.Account(
        f"{cluster_name}-node-sa",
        account_id=account_id,
        project=project,
        display_name=f"GKE nodes for {cluster_name}",
        description=description,
    )

    return {
        "account": account,
        "account_id": account_id,
        "email": account.email,
        "member": account.email.apply(lambda email: f"serviceAccount:{email}"),
    }


def bind_node_roles(project: str, cluster_name: str, member: 'pulumi.Output[str]') -> Dict[str, Any]:
    """
    Bind the fixed node roles to the service account

    Args:
        project: GCP project id
        cluster_name: GKE cluster name, used for resource naming
        member: IAM member string of the service account

    Returns:
        Dict of IAM member resources keyed by short role name
    """
    bindings = {}
    for short_name, role in NODE_ROLES:
        bindings[short_name] = gcp.projects.IAMMember(
            f"{cluster_name}-node-{short_name}",
            project=project,
            role=role,
            member=member,
        )
    return bindings


def create_node_identity(project: str, cluster_name: str,
                         gate: Optional[pulumi.Output] = None) -> Dict[str, Any]:
    """
    Create the node identity with its role bindings

    Args:
        project: GCP project id
        cluster_name: GKE cluster name
        gate: Output that must resolve before anything is registered, such as
            the variant switch guard

    Returns:
        Dict with identity outputs and resource references
    """
    account_result = create_node_service_account(project, cluster_name, gate)
    bindings = bind_node_roles(project, cluster_name, account_result["member"])

    pulumi.log.info(
        f"Node identity {account_result['account_id']} declared with roles: "
        + ", ".join(role for _, role in NODE_ROLES)
    )

    return {
        "account_id": account_result["account_id"],
        "email": account_result["email"],
        "member": account_result["member"],
        # Keep references to resources for dependencies
        "_account": account_result["account"],
        "_role_bindings": bindings,
    }
