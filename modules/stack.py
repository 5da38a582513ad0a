"""
Stack composition
Validation first, then identity, dataset and cluster in dependency order
"""

import pulumi
from typing import Dict, Any

from config import ClusterSpec
from modules.variants import select_variant, guard_variant_switch
from modules.parity import verify_variant_parity
from modules.iam.functions import create_node_identity
from modules.usage_metering.functions import create_usage_sink, usage_dataset_id
from modules.gke.functions import create_cluster

# Identity email is not known yet; both variants share this placeholder
PARITY_WRITER = "node-identity"


def declare_stack(spec: ClusterSpec, stack_ref=None) -> Dict[str, Any]:
    """
    Declare every resource for the selected variant

    Args:
        spec: Validated ClusterSpec
        stack_ref: Stack reference for the variant guard, defaults to this stack

    Returns:
        Dict with the variant output and the identity, sink and cluster results

    Raises:
        VariantDriftError: If the variants diverge beyond the safety fields;
            raised before any resource is declared
    """
    # 1. Variant, chosen once
    variant = select_variant(spec)
    pulumi.log.info(f"Deploying {spec.cluster_name} as the {variant.name} variant")

    # Both variants must stay identical apart from the safety fields
    verify_variant_parity(spec, PARITY_WRITER, usage_dataset_id(spec.cluster_name))

    if spec.guard_variant_switch:
        variant_output = guard_variant_switch(variant, stack_ref)
        gate = variant_output
    else:
        pulumi.log.warn(
            "Variant switch guard disabled; changing is_prod on a deployed stack still "
            "requires pulumi destroy before the next update"
        )
        variant_output = pulumi.Output.from_input(variant.name)
        gate = None

    # 2. Node identity, registered only after the guard passes
    identity = create_node_identity(spec.project, spec.cluster_name, gate=gate)

    # 3. Usage metering dataset
    sink = create_usage_sink(spec, variant, identity["email"])

    # 4. GKE cluster
    cluster = create_cluster(spec, variant, sink["dataset_id"])

    return {
        "variant": variant_output,
        "identity": identity,
        "sink": sink,
        "cluster": cluster,
    }
