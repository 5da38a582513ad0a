"""
Usage Metering Module Functions
Creates the BigQuery dataset that receives GKE resource usage records
"""

import re
import pulumi
import pulumi_gcp as gcp
from typing import Dict, Any

DATASET_PREFIX = "usage_metering_"

_DISALLOWED_DATASET_CHARS = re.compile(r"[^A-Za-z0-9_]")


def normalize_dataset_name(cluster_name: str) -> str:
    """Replace characters BigQuery does not allow in dataset ids"""
    return _DISALLOWED_DATASET_CHARS.sub("_", cluster_name)


def usage_dataset_id(cluster_name: str) -> str:
    """Dataset id for a cluster, identical for both variants"""
    return DATASET_PREFIX + normalize_dataset_name(cluster_name)


def dataset_args(spec, variant, writer_email) -> Dict[str, Any]:
    """
    Build the dataset arguments for one variant

    Args:
        spec: Validated ClusterSpec
        variant: Selected variant
        writer_email: Node service account email, granted WRITER

    Returns:
        Keyword arguments for gcp.bigquery.Dataset
    """
    return {
        "dataset_id": usage_dataset_id(spec.cluster_name),
        "project": spec.project,
        "location": spec.bigquery_location,
        "description": f"GKE usage metering for cluster {spec.cluster_name}",
        "labels": spec.common_labels,
        "accesses": [
            {"role": "OWNER", "special_group": "projectOwners"},
            {"role": "WRITER", "user_by_email": writer_email},
        ],
        # False makes the provider refuse deletion while tables remain
        "delete_contents_on_destroy": not variant.retain_on_destroy,
    }


def create_usage_sink(spec, variant, writer_email: 'pulumi.Output[str]') -> Dict[str, Any]:
    """
    Create the usage metering dataset for the selected variant

    Args:
        spec: Validated ClusterSpec
        variant: Selected variant
        writer_email: Node service account email

    Returns:
        Dict with dataset resource and outputs
    """
    args = dataset_args(spec, variant, writer_email)

    dataset = gcp.bigquery.Dataset(
        f"{spec.cluster_name}-usage-metering-{variant.name}",
        **args
    )

    pulumi.log.info(
        f"Usage metering dataset {args['dataset_id']} declared for the {variant.name} variant "
        f"(retain on destroy: {variant.retain_on_destroy})"
    )

    return {
        "dataset_id": dataset.dataset_id,
        "variant": variant.name,
        "_dataset": dataset,
    }
