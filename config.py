"""
Configuration management for the GKE usage-metering cluster
Reads stack config and produces a validated ClusterSpec
"""

import re
import pulumi
from dataclasses import dataclass, field
from typing import Dict, Any, List

PROJECT_ID_PATTERN = re.compile(r"^[a-z][a-z0-9-]{4,28}[a-z0-9]$")
CLUSTER_NAME_PATTERN = re.compile(r"^[a-z]([-a-z0-9]*[a-z0-9])?$")
CLUSTER_NAME_MAX_LENGTH = 40
MAINTENANCE_TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
LABEL_KEY_PATTERN = re.compile(r"^[a-z][a-z0-9_-]{0,62}$")
LABEL_VALUE_PATTERN = re.compile(r"^[a-z0-9_-]{0,63}$")

RELEASE_CHANNELS = ("RAPID", "REGULAR", "STABLE", "EXTENDED")

# Only these spellings select a variant; everything else is rejected
IS_PROD_VALUES = {"true": True, "false": False}


class ConfigError(Exception):
    """Raised when stack configuration is missing or malformed"""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Invalid cluster configuration:\n  - " + "\n  - ".join(self.problems))


def parse_is_prod(value: Any) -> bool:
    """
    Parse the variant flag without defaulting

    Args:
        value: Raw config value (bool or string)

    Returns:
        True for the production variant, False for non-production

    Raises:
        ConfigError: If the value is absent or not a recognized spelling
    """
    if isinstance(value, bool):
        return value
    if value is None or str(value).strip() == "":
        raise ConfigError(["is_prod must be set explicitly to 'true' or 'false'"])

    normalized = str(value).strip().lower()
    if normalized not in IS_PROD_VALUES:
        raise ConfigError([f"is_prod must be 'true' or 'false', got {value!r}"])
    return IS_PROD_VALUES[normalized]


@dataclass(frozen=True)
class ClusterSpec:
    """Validated input for the whole cluster declaration"""

    project: str
    cluster_name: str
    cluster_location: str
    is_prod: bool
    release_channel: str
    bigquery_location: str
    security_group: str
    maintenance_start_time: str = "03:00"
    labels: Dict[str, str] = field(default_factory=dict)
    guard_variant_switch: bool = True

    def __post_init__(self):
        problems = self.validate()
        if problems:
            raise ConfigError(problems)

    def validate(self) -> List[str]:
        problems = []

        if not self.project or not PROJECT_ID_PATTERN.match(self.project):
            problems.append(f"project must be a valid GCP project id, got {self.project!r}")

        if not self.cluster_name:
            problems.append("cluster_name is required")
        elif len(self.cluster_name) > CLUSTER_NAME_MAX_LENGTH:
            problems.append(f"cluster_name must be at most {CLUSTER_NAME_MAX_LENGTH} characters")
        elif not CLUSTER_NAME_PATTERN.match(self.cluster_name):
            problems.append(
                f"cluster_name must be lowercase letters, digits and hyphens, got {self.cluster_name!r}"
            )

        if not self.cluster_location:
            problems.append("cluster_location is required")

        if not isinstance(self.is_prod, bool):
            problems.append(f"is_prod must be a bool, got {self.is_prod!r}")

        if self.release_channel not in RELEASE_CHANNELS:
            problems.append(
                f"release_channel must be one of {', '.join(RELEASE_CHANNELS)}, got {self.release_channel!r}"
            )

        if not self.bigquery_location:
            problems.append("bigquery_location is required")

        if not self.security_group or not EMAIL_PATTERN.match(self.security_group):
            problems.append(f"security_group must be a Google Group email, got {self.security_group!r}")

        if not MAINTENANCE_TIME_PATTERN.match(self.maintenance_start_time or ""):
            problems.append(
                f"maintenance_start_time must be HH:MM, got {self.maintenance_start_time!r}"
            )

        if not isinstance(self.labels, dict):
            problems.append(f"labels must be a mapping, got {type(self.labels).__name__}")
        else:
            for key, value in self.labels.items():
                if not isinstance(key, str) or not LABEL_KEY_PATTERN.match(key):
                    problems.append(
                        f"label key {key!r} must start with a lowercase letter and use only "
                        f"lowercase letters, digits, underscores and hyphens (max 63)"
                    )
                if not isinstance(value, str) or not LABEL_VALUE_PATTERN.match(value):
                    problems.append(
                        f"label value {value!r} for {key!r} must use only lowercase letters, "
                        f"digits, underscores and hyphens (max 63)"
                    )

        return problems

    @property
    def common_labels(self) -> Dict[str, str]:
        """Labels applied to every labelled resource"""
        labels = {
            "managed-by": "pulumi",
            "cluster": self.cluster_name,
        }
        labels.update(self.labels)
        return labels


class Config:
    """Centralized configuration management for the cluster stack"""

    REQUIRED_KEYS = (
        "project",
        "cluster_name",
        "cluster_location",
        "is_prod",
        "release_channel",
        "bigquery_location",
        "security_group",
    )

    def __init__(self):
        self.config = pulumi.Config()
        self.gcp_config = pulumi.Config("gcp")

        # Cluster identity
        self.project = self.config.get("project") or self.gcp_config.get("project")
        self.cluster_name = self.config.get("cluster_name")
        self.cluster_location = self.config.get("cluster_location")

        # Variant flag is kept raw until cluster_spec() so absence is reported, not defaulted
        self.is_prod = self.config.get("is_prod")

        # Cluster settings
        self.release_channel = self.config.get("release_channel")
        self.security_group = self.config.get("security_group")
        self.maintenance_start_time = self.config.get("maintenance_start_time") or "03:00"

        # Usage metering
        self.bigquery_location = self.config.get("bigquery_location")

        # Safety
        guard = self.config.get_bool("guard_variant_switch")
        self.guard_variant_switch = True if guard is None else guard

        # Additional labels
        self.additional_labels = self.config.get_object("labels") or {}

    def missing_keys(self) -> List[str]:
        """Required keys with no value in stack config"""
        return [key for key in self.REQUIRED_KEYS if getattr(self, key) in (None, "")]

    def cluster_spec(self) -> ClusterSpec:
        """
        Build the validated cluster spec

        Returns:
            ClusterSpec

        Raises:
            ConfigError: If any required key is missing or any value is malformed
        """
        problems = [f"missing required config: {key}" for key in self.missing_keys()]

        labels = self.additional_labels
        if not isinstance(labels, dict):
            problems.append(f"labels must be a mapping of label names to values, got {type(labels).__name__}")

        if problems:
            raise ConfigError(problems)

        return ClusterSpec(
            project=self.project,
            cluster_name=self.cluster_name,
            cluster_location=self.cluster_location,
            is_prod=parse_is_prod(self.is_prod),
            release_channel=str(self.release_channel).strip().upper(),
            bigquery_location=self.bigquery_location,
            security_group=self.security_group,
            maintenance_start_time=self.maintenance_start_time,
            labels={str(k): str(v) for k, v in labels.items()},
            guard_variant_switch=self.guard_variant_switch,
        )


def get_config() -> Config:
    """Get the global configuration instance"""
    return Config()
