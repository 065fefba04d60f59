# coding: utf-8
"""
Unit tests for costbasis.config
"""
import unittest
import os
import tempfile

from costbasis.config import CostbasisConfig
from costbasis.inventory import RemovalPolicy


class CostbasisConfigTestCase(unittest.TestCase):
    def setUp(self):
        self.config = CostbasisConfig()
        self.config.make_default()

    def test_defaults(self):
        self.assertIs(self.config.removal_policy, RemovalPolicy.DEFAULT)
        self.assertEqual(self.config.precision, 2)
        self.assertEqual(self.config.price_precision, 4)
        self.assertEqual(self.config.default_dir, "")

    def test_read(self):
        self.config.read_string(
            "[holding]\nremoval_policy = add_realized_for_removed\n"
            "[report]\nprecision = 3\n"
        )
        self.assertIs(
            self.config.removal_policy, RemovalPolicy.REALIZED_REMOVED_VALUE_AT_COST
        )
        self.assertEqual(self.config.precision, 3)
        self.assertEqual(self.config.price_precision, 4)

    def test_bad_policy(self):
        self.config["holding"]["removal_policy"] = "HIFO"
        with self.assertRaises(ValueError):
            self.config.removal_policy

    def test_save(self):
        self.config["holding"]["removal_policy"] = "REMOVED_VALUE_AT_ZERO"
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "sub", "costbasis.cfg")
            self.config.save(path)
            config = CostbasisConfig()
            config.read(path)
        self.assertIs(config.removal_policy, RemovalPolicy.REMOVED_VALUE_AT_ZERO)


if __name__ == "__main__":
    unittest.main()
