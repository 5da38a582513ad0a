"""
IAM Module
Node service account with least-privilege project roles
"""

from .functions import create_node_identity, node_account_id, NODE_ROLES

__all__ = ["create_node_identity", "node_account_id", "NODE_ROLES"]
