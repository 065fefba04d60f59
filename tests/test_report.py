# coding: utf-8
"""
Unit tests for costbasis.inventory.report
"""
# stdlib imports
import unittest


# 3rd party imports
import tablib


# local imports
from costbasis.inventory import Holding, Portfolio, RemovalPolicy, report
from common import tx, lot, match


class PortfolioReportTestCase(unittest.TestCase):
    def setUp(self):
        self.portfolio = Portfolio()
        self.portfolio["ETH"] = Holding.from_lots(
            [lot("2020-01-01,1.5,-1500.0"), lot("2020-02-01,0.5,-600.0")]
        )
        self.portfolio["BTC"] = Holding.from_lots([lot("2020-03-01,-1.0,9000.0")])
        self.portfolio["XRP"] = Holding()

    def testFlatten(self):
        dataset = report.flatten_portfolio(self.portfolio)
        self.assertEqual(dataset.headers, list(report.FlatLot._fields))
        self.assertEqual(
            dataset[:],
            [
                ("BTC", "2020-03-01", -1.0, 9000.0, 9000.0),
                ("ETH", "2020-01-01", 1.5, 1000.0, -1500.0),
                ("ETH", "2020-02-01", 0.5, 1200.0, -600.0),
            ],
        )

    def testConsolidate(self):
        dataset = report.flatten_portfolio(self.portfolio, consolidate=True)
        self.assertEqual(
            dataset[:],
            [("BTC", "", -1.0, 9000.0, 9000.0), ("ETH", "", 2.0, 1050.0, -2100.0)],
        )

    def testRoundTrip(self):
        text = report.flatten_portfolio(self.portfolio).export("csv")
        dataset = tablib.Dataset().load(text, format="csv")
        portfolio = report.unflatten_portfolio(
            dataset, policy=RemovalPolicy.REMOVED_VALUE_AT_MARKET
        )
        self.assertEqual(sorted(portfolio), ["BTC", "ETH"])
        self.assertEqual(
            portfolio["ETH"].inventory(), self.portfolio["ETH"].inventory()
        )
        self.assertEqual(
            portfolio["BTC"].inventory(), self.portfolio["BTC"].inventory()
        )
        self.assertIs(portfolio["ETH"].policy, RemovalPolicy.REMOVED_VALUE_AT_MARKET)

        # Loaded Holdings keep booking FIFO
        realized = portfolio["ETH"].add_transaction(tx("2020-04-01,sell,1.5,2000.0"))
        self.assertEqual(
            realized, [match("2020-04-01,-1.5,3000.0,2020-01-01,-1500.0")]
        )

    def testUnflattenConsolidated(self):
        text = report.flatten_portfolio(self.portfolio, consolidate=True).export("csv")
        dataset = tablib.Dataset().load(text, format="csv")
        with self.assertRaises(ValueError):
            report.unflatten_portfolio(dataset)

    def testUnflattenSkipsZero(self):
        dataset = tablib.Dataset(headers=report.FlatLot._fields)
        dataset.append(("ETH", "2020-01-01", "0", "0", "0"))
        dataset.append(("BTC", "2020-01-01", "1", "100", "-100"))
        portfolio = report.unflatten_portfolio(dataset)
        self.assertEqual(list(portfolio), ["BTC"])

    def testUnflattenBadValue(self):
        dataset = tablib.Dataset(headers=report.FlatLot._fields)
        dataset.append(("ETH", "2020-01-01", "lots", "100", "-100"))
        with self.assertRaises(ValueError):
            report.unflatten_portfolio(dataset)


class RealizedReportTestCase(unittest.TestCase):
    def setUp(self):
        self.realized = {
            "ETH": [
                match("2020-04-01,-1.0,2000.0,2020-01-01,-1000.0"),
                match("2020-04-01,-0.5,1000.0,2020-02-01,-600.0"),
            ],
            "BTC": [match("2020-05-01,1.0,-8000.0,2020-03-01,9000.0")],
        }

    def testFlatten(self):
        dataset = report.flatten_realized(self.realized)
        self.assertEqual(dataset.headers, list(report.FlatRealized._fields))
        self.assertEqual(
            dataset[:],
            [
                ("BTC", "2020-05-01", 1.0, -8000.0, "2020-03-01", 9000.0, 1000.0),
                ("ETH", "2020-04-01", -1.0, 2000.0, "2020-01-01", -1000.0, 1000.0),
                ("ETH", "2020-04-01", -0.5, 1000.0, "2020-02-01", -600.0, 400.0),
            ],
        )

    def testFlattenCompact(self):
        dataset = report.flatten_realized(self.realized, compact=True)
        self.assertEqual(dataset.headers, list(report.FlatCompact._fields))
        self.assertEqual(
            dataset[:],
            [
                ("BTC", "2020-05-01", 1.0, -8000.0, "2020-03-01", 9000.0, 1000.0),
                (
                    "ETH",
                    "2020-04-01",
                    1.5,
                    3000.0,
                    "2020-01-01;2020-02-01",
                    -1600.0,
                    1400.0,
                ),
            ],
        )

    def testRoundingHalfUp(self):
        realized = {"ETH": [match("2020-04-01,-0.123456,10.005,2020-01-01,-3.0")]}
        (row,) = report.flatten_realized(realized)[:]
        self.assertEqual(row[2], -0.1235)
        self.assertEqual(row[3], 10.01)


if __name__ == "__main__":
    unittest.main()
