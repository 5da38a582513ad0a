"""
Variant parity check
Builds the arguments of both variants from one spec and fails on any
difference outside the permitted safety fields.
"""

import pulumi
from typing import Dict, Any, Set

from config import ClusterSpec
from modules.variants import both_variants
from modules.usage_metering.functions import dataset_args
from modules.gke.functions import cluster_args

PERMITTED_DATASET_DIVERGENCES = frozenset({"delete_contents_on_destroy"})
PERMITTED_CLUSTER_DIVERGENCES = frozenset({"deletion_protection", "release_channel"})


class VariantDriftError(Exception):
    """Raised when prod and non-prod declarations differ beyond the safety fields"""


def find_divergences(left: Dict[str, Any], right: Dict[str, Any]) -> Set[str]:
    """Keys present in either dict whose values differ"""
    missing = object()
    return {
        key for key in set(left) | set(right)
        if left.get(key, missing) != right.get(key, missing)
    }


def verify_variant_parity(spec: ClusterSpec, writer_email, dataset_id) -> Dict[str, Set[str]]:
    """
    Compare both variants' declarations for one spec

    Args:
        spec: Validated ClusterSpec
        writer_email: Node service account email, shared by both variants
        dataset_id: Dataset id referenced by both clusters

    Returns:
        Dict with the divergent keys for "dataset" and "cluster"

    Raises:
        VariantDriftError: On any non-permitted difference, or when a safety
            field does not differ in the required direction
    """
    prod, nonprod = both_variants(spec)

    prod_dataset = dataset_args(spec, prod, writer_email)
    nonprod_dataset = dataset_args(spec, nonprod, writer_email)
    prod_cluster = cluster_args(spec, prod, dataset_id)
    nonprod_cluster = cluster_args(spec, nonprod, dataset_id)

    divergences = {
        "dataset": find_divergences(prod_dataset, nonprod_dataset),
        "cluster": find_divergences(prod_cluster, nonprod_cluster),
    }

    problems = []
    unexpected = divergences["dataset"] - PERMITTED_DATASET_DIVERGENCES
    if unexpected:
        problems.append(f"dataset fields differ between variants: {sorted(unexpected)}")
    unexpected = divergences["cluster"] - PERMITTED_CLUSTER_DIVERGENCES
    if unexpected:
        problems.append(f"cluster fields differ between variants: {sorted(unexpected)}")

    if prod_dataset["delete_contents_on_destroy"] is not False:
        problems.append("prod dataset must not delete contents on destroy")
    if nonprod_dataset["delete_contents_on_destroy"] is not True:
        problems.append("non-prod dataset must delete contents on destroy")
    if prod_cluster["deletion_protection"] is not True:
        problems.append("prod cluster must be deletion protected")
    if nonprod_cluster["deletion_protection"] is not False:
        problems.append("non-prod cluster must not be deletion protected")
    if prod_cluster.get("release_channel") != {"channel": spec.release_channel}:
        problems.append("prod cluster must pin the configured release channel")
    if "release_channel" in nonprod_cluster:
        problems.append("non-prod cluster must leave the release channel to the provider")

    if problems:
        raise VariantDriftError("; ".join(problems))

    pulumi.log.info(
        f"Variant parity verified for {spec.cluster_name}: dataset differs in "
        f"{sorted(divergences['dataset'])}, cluster differs in {sorted(divergences['cluster'])}"
    )
    return divergences
