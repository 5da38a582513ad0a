"""
GKE cluster with usage metering
One flag selects the production or non-production variant
"""
import pulumi
from config import get_config
from modules.variants import VARIANT_OUTPUT
from modules.stack import declare_stack

# Configuration
config = get_config()
spec = config.cluster_spec()

stack = declare_stack(spec)
identity = stack["identity"]
sink = stack["sink"]
cluster = stack["cluster"]

# Exports, consumed by the node pool stack
pulumi.export(VARIANT_OUTPUT, stack["variant"])
pulumi.export("cluster_name", cluster["cluster_name"])
pulumi.export("cluster_location", cluster["cluster_location"])
pulumi.export("cluster_id", cluster["cluster_id"])
pulumi.export("cluster_endpoint", cluster["cluster_endpoint"])
pulumi.export("node_service_account_email", identity["email"])
pulumi.export("usage_dataset_id", sink["dataset_id"])
pulumi.export("get_credentials_command",
    pulumi.Output.concat(
        "gcloud container clusters get-credentials ", cluster["cluster_name"],
        " --location ", cluster["cluster_location"],
        " --project ", spec.project
    ))
