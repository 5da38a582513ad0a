"""
Shared test fixtures
"""

from unittest.mock import Mock

from config import ClusterSpec


def make_spec(**overrides):
    values = {
        "project": "payments-platform",
        "cluster_name": "payments-api",
        "cluster_location": "europe-west1",
        "is_prod": True,
        "release_channel": "REGULAR",
        "bigquery_location": "EU",
        "security_group": "gke-security-groups@example.com",
    }
    values.update(overrides)
    return ClusterSpec(**values)


def stack_config(values, gcp_values=None):
    """Patchable replacement for pulumi.Config keyed by namespace"""
    gcp_values = gcp_values or {}

    def factory(name=None):
        source = gcp_values if name == "gcp" else values
        namespace = Mock()
        namespace.get.side_effect = lambda key: source.get(key)
        namespace.get_bool.side_effect = lambda key: source.get(key)
        namespace.get_object.side_effect = lambda key: source.get(key)
        return namespace

    return factory
