"""
Unit tests for configuration loading and ClusterSpec validation
"""

import unittest
from unittest.mock import patch
import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import Config, ConfigError, parse_is_prod
from tests.fixtures import make_spec, stack_config


class TestParseIsProd(unittest.TestCase):
    """The variant flag is parsed strictly"""

    def test_true_spellings(self):
        for value in ("true", "True", " TRUE ", True):
            with self.subTest(value=value):
                self.assertTrue(parse_is_prod(value))

    def test_false_spellings(self):
        for value in ("false", "False", False):
            with self.subTest(value=value):
                self.assertFalse(parse_is_prod(value))

    def test_missing_flag_is_an_error(self):
        for value in (None, "", "   "):
            with self.subTest(value=value):
                with self.assertRaises(ConfigError):
                    parse_is_prod(value)

    def test_unrecognized_flag_is_an_error(self):
        for value in ("yes", "1", "prod", "0", "no"):
            with self.subTest(value=value):
                with self.assertRaises(ConfigError) as ctx:
                    parse_is_prod(value)
                self.assertIn(repr(value), str(ctx.exception))


class TestClusterSpec(unittest.TestCase):
    """ClusterSpec validates on construction"""

    def test_valid_spec(self):
        spec = make_spec()
        self.assertEqual(spec.cluster_name, "payments-api")
        self.assertEqual(spec.maintenance_start_time, "03:00")
        self.assertTrue(spec.guard_variant_switch)

    def test_invalid_values_are_collected(self):
        with self.assertRaises(ConfigError) as ctx:
            make_spec(project="X", cluster_name="Payments_API", release_channel="BETA")
        self.assertEqual(len(ctx.exception.problems), 3)

    def test_cluster_name_too_long(self):
        with self.assertRaises(ConfigError):
            make_spec(cluster_name="a" * 41)

    def test_is_prod_must_be_bool(self):
        with self.assertRaises(ConfigError):
            make_spec(is_prod="true")

    def test_security_group_must_be_email(self):
        with self.assertRaises(ConfigError):
            make_spec(security_group="gke-security-groups")

    def test_maintenance_time_format(self):
        with self.assertRaises(ConfigError):
            make_spec(maintenance_start_time="25:00")
        self.assertEqual(make_spec(maintenance_start_time="23:30").maintenance_start_time, "23:30")

    def test_common_labels(self):
        spec = make_spec(labels={"team": "payments", "managed-by": "platform"})
        self.assertEqual(spec.common_labels, {
            "managed-by": "platform",
            "cluster": "payments-api",
            "team": "payments",
        })

    def test_label_rules(self):
        with self.assertRaises(ConfigError) as ctx:
            make_spec(labels={"Team": "payments", "owner": "Payments API"})

        problems = ctx.exception.problems
        self.assertEqual(len(problems), 2)
        self.assertIn("label key 'Team'", problems[0])
        self.assertIn("label value 'Payments API'", problems[1])

    def test_label_value_too_long(self):
        with self.assertRaises(ConfigError):
            make_spec(labels={"team": "x" * 64})

    def test_valid_labels(self):
        spec = make_spec(labels={"team": "payments", "cost-center": "cc_1234", "tier": ""})
        self.assertEqual(spec.labels["cost-center"], "cc_1234")

    def test_spec_is_immutable(self):
        spec = make_spec()
        with self.assertRaises(Exception):
            spec.is_prod = False


class TestConfig(unittest.TestCase):
    """Config reads stack settings and builds the spec"""

    VALUES = {
        "project": "payments-platform",
        "cluster_name": "payments-api",
        "cluster_location": "europe-west1",
        "is_prod": "true",
        "release_channel": "regular",
        "bigquery_location": "EU",
        "security_group": "gke-security-groups@example.com",
    }

    def test_cluster_spec_from_stack_config(self):
        with patch("config.pulumi.Config", side_effect=stack_config(self.VALUES)):
            spec = Config().cluster_spec()

        self.assertTrue(spec.is_prod)
        self.assertEqual(spec.release_channel, "REGULAR")
        self.assertEqual(spec.maintenance_start_time, "03:00")
        self.assertEqual(spec.labels, {})
        self.assertTrue(spec.guard_variant_switch)

    def test_project_falls_back_to_gcp_namespace(self):
        values = dict(self.VALUES)
        del values["project"]
        factory = stack_config(values, {"project": "shared-platform"})
        with patch("config.pulumi.Config", side_effect=factory):
            spec = Config().cluster_spec()

        self.assertEqual(spec.project, "shared-platform")

    def test_missing_keys_are_reported_together(self):
        values = dict(self.VALUES)
        del values["is_prod"]
        del values["bigquery_location"]
        with patch("config.pulumi.Config", side_effect=stack_config(values)):
            with self.assertRaises(ConfigError) as ctx:
                Config().cluster_spec()

        self.assertEqual(ctx.exception.problems, [
            "missing required config: is_prod",
            "missing required config: bigquery_location",
        ])

    def test_guard_can_be_disabled(self):
        values = dict(self.VALUES, guard_variant_switch=False, labels={"team": "payments"})
        with patch("config.pulumi.Config", side_effect=stack_config(values)):
            spec = Config().cluster_spec()

        self.assertFalse(spec.guard_variant_switch)
        self.assertEqual(spec.labels, {"team": "payments"})

    def test_labels_must_be_a_mapping(self):
        values = dict(self.VALUES, labels=["team=payments"])
        del values["cluster_location"]
        with patch("config.pulumi.Config", side_effect=stack_config(values)):
            with self.assertRaises(ConfigError) as ctx:
                Config().cluster_spec()

        self.assertEqual(ctx.exception.problems, [
            "missing required config: cluster_location",
            "labels must be a mapping of label names to values, got list",
        ])

    def test_label_values_from_config_are_validated(self):
        values = dict(self.VALUES, labels={"team": "Payments"})
        with patch("config.pulumi.Config", side_effect=stack_config(values)):
            with self.assertRaises(ConfigError):
                Config().cluster_spec()


if __name__ == "__main__":
    unittest.main()
