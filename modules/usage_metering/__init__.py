"""
Usage Metering Module
BigQuery dataset receiving GKE resource usage export
"""

from .functions import create_usage_sink, usage_dataset_id, dataset_args

__all__ = ["create_usage_sink", "usage_dataset_id", "dataset_args"]
