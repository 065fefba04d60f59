# coding: utf-8
"""CLI front end to book a transaction log to FIFO inventory and report results.


INPUT
-----
A CSV transaction log with columns timestamp,ttype,symbol,quantity,price
(q.v. costbasis.reader).  Each symbol is booked to its own Holding.

CONFIGURE
---------
We look for the config file in ~/.config/costbasis/costbasis.cfg (or wherever the
COSTBASIS_CONFIG environment variable points).  It's in INI format:

    [holding]
    removal_policy = DEFAULT

    [report]
    precision = 2
    price_precision = 4

    [data]
    default_dir = ~/crypto

`removal_policy` decides how withdrawals/sends are valued; one of DEFAULT,
REALIZED_REMOVED_VALUE_AT_COST, REMOVED_VALUE_AT_MARKET, REMOVED_VALUE_AT_ZERO.
Override it per run with --policy/-p.
Relative input paths are looked up under `default_dir` when it's set.

REPORT
------
Realized gains, one row per matched lot:
    costbasis gains /path/to/transactions.csv -o /path/to/gains.csv

Realized gains, one row per close date:
    costbasis gains -c /path/to/transactions.csv

Ending lots:
    costbasis lots /path/to/transactions.csv -o /path/to/lots.csv

If carrying over lots from a prior period's `lots` dump:
    costbasis lots -l /path/to/last/lots.csv /path/to/transactions.csv

Position and total realized per symbol:
    costbasis summary /path/to/transactions.csv
"""
# stdlib imports
import argparse
from argparse import ArgumentParser, _SubParsersAction
import logging
import os
import sys
from typing import Dict, List, Optional, Tuple

# 3rd party imports
import tablib


# Local imports
from costbasis import reader, CONFIG
from costbasis.inventory import (
    Portfolio,
    RealizedMatch,
    RemovalPolicy,
    realized_to_compact,
    report,
    total_realized,
)


def resolve_path(path: Optional[str]) -> Optional[str]:
    """Relative paths are looked up under the configured data directory, if any."""
    if path and CONFIG.default_dir and not os.path.isabs(path):
        return os.path.join(os.path.expanduser(CONFIG.default_dir), path)
    return path


def book_file(
    path: str, policy: RemovalPolicy, lotloadfile: Optional[str] = None
) -> Tuple[Portfolio, Dict[str, List[RealizedMatch]]]:
    """Book a CSV transaction log to a Portfolio.

    Args:
        path: filesystem path to the transaction log.
        policy: removal policy for every Holding.
        lotloadfile: if set, path to a `lots` dump used to seed the Portfolio.

    Returns:
        (Portfolio after booking, map of symbol to RealizedMatches)
    """
    portfolio = load_portfolio(lotloadfile, policy)
    transactions = reader.read(resolve_path(path))
    realized = portfolio.book_all(transactions)
    return portfolio, realized


def load_portfolio(path: Optional[str], policy: RemovalPolicy) -> Portfolio:
    """Deserialize starting positions from a saved `lots` dumpfile.

    Args:
        path: filesystem path to Lot dumpfile.
        policy: removal policy for every Holding.
    """
    if not path:
        return Portfolio(policy=policy)

    with open(resolve_path(path), "r") as csvfile:
        data = tablib.Dataset().load(csvfile.read(), format="csv")

    logging.info(f"Loaded {len(data)} lots from {path}")
    return report.unflatten_portfolio(data, policy=policy)


def write_dataset(dataset: tablib.Dataset, path: Optional[str]) -> None:
    if path:
        with open(path, "w") as csvfile:
            csvfile.write(dataset.export("csv"))
    else:
        sys.stdout.write(dataset.export("csv"))


def dump_lots(args: argparse.Namespace) -> None:
    """Book transactions; write ending Lots.

    Args:
        args: argparse.Namespace instance populated with parsed CLI arguments.
    """
    portfolio, _ = book_file(args.file, args.policy, args.loadcsv)
    dataset = report.flatten_portfolio(portfolio, consolidate=args.consolidate)
    write_dataset(dataset, args.output)


def dump_gains(args: argparse.Namespace) -> None:
    """Book transactions; write RealizedMatches.

    Args:
        args: argparse.Namespace instance populated with parsed CLI arguments.
    """
    _, realized = book_file(args.file, args.policy, args.loadcsv)
    dataset = report.flatten_realized(realized, compact=args.consolidate)
    write_dataset(dataset, args.output)


def print_summary(args: argparse.Namespace) -> None:
    """Book transactions; print position & realized returns per symbol.

    Args:
        args: argparse.Namespace instance populated with parsed CLI arguments.
    """
    portfolio, realized = book_file(args.file, args.policy, args.loadcsv)
    rule = "-" * 61
    for symbol in sorted(portfolio):
        matches = realized.get(symbol, [])
        print(f"SYMBOL: {symbol} __ {portfolio[symbol]}")
        print(f"REALIZED RETURNS: {total_realized(matches):.2f}")
        for summary in realized_to_compact(matches):
            print(summary)
        if args.detail:
            print("DETAILED RETURNS: ")
            for match in matches:
                print(match)
            print("INVENTORY: ")
            for lot in portfolio[symbol].inventory():
                print(lot)
        print(rule)


def make_argparser() -> Tuple[ArgumentParser, _SubParsersAction]:
    """Return subparsers along with the ArgumentParer, so the latter can be extended.
    """
    argparser = ArgumentParser(description="FIFO cost basis utility")
    argparser.add_argument(
        "--verbose", "-v", action="count", default=0, help="-vv for DEBUG"
    )
    argparser.set_defaults(func=None)
    subparsers = argparser.add_subparsers()

    common = ArgumentParser(add_help=False)
    common.add_argument("file", help="CSV transaction log")
    common.add_argument(
        "-l", "--loadcsv", default=None, help="CSV dump file of Lots to load"
    )
    common.add_argument(
        "-p",
        "--policy",
        default=None,
        help="Removal valuation policy (overrides config file)",
    )

    lots_parser = subparsers.add_parser(
        "lots", aliases=["dump"], parents=[common], help="Dump ending Lots to CSV"
    )
    lots_parser.add_argument("-o", "--output", default=None, help="CSV file")
    lots_parser.add_argument(
        "-c", "--consolidate", action="store_true", help="One row per symbol"
    )
    lots_parser.set_defaults(func=dump_lots)

    gain_parser = subparsers.add_parser(
        "gains", parents=[common], help="Dump realized gains to CSV"
    )
    gain_parser.add_argument("-o", "--output", default=None, help="CSV file")
    gain_parser.add_argument(
        "-c", "--consolidate", action="store_true", help="One row per close date"
    )
    gain_parser.set_defaults(func=dump_gains)

    summary_parser = subparsers.add_parser(
        "summary", parents=[common], help="Print position & realized per symbol"
    )
    summary_parser.add_argument(
        "-d", "--detail", action="store_true", help="Also print matches & Lots"
    )
    summary_parser.set_defaults(func=print_summary)

    return argparser, subparsers


def run(argparser: ArgumentParser, argv: Optional[List[str]] = None) -> None:
    """Parse args and pass them to the indication function.

    Args:
        argparser: the ArgumentParser instance returned by make_argparser().
        argv: command line arguments; by default sys.argv[1:].
    """
    args = argparser.parse_args(argv)

    logLevel = (3 - min(args.verbose, 2)) * 10
    logging.basicConfig(level=logLevel)
    logging.captureWarnings(True)

    # Parse policy arg
    if hasattr(args, "policy"):
        try:
            if args.policy:
                args.policy = RemovalPolicy.from_token(args.policy)
            else:
                args.policy = CONFIG.removal_policy
        except ValueError as err:
            argparser.error(str(err))

    # Execute selected function
    if args.func:
        args.func(args)
    else:
        argparser.print_help()


def main() -> None:
    argparser, subparsers = make_argparser()
    run(argparser)


if __name__ == "__main__":
    main()
