"""
CSV reader for transaction logs, e.g. an exchange or wallet history export.

Expected columns (header names are case-insensitive; extra columns are ignored):

    timestamp,ttype,symbol,quantity,price
    2021-01-04T10:20:00Z,buy,ETH,1.5,1040.50
    2021-02-01,send,ETH,0.5,1320.00

`timestamp` only needs to start with an ISO date; `ttype` is any alias accepted by
InventoryType.from_token(); `quantity` is an unsigned magnitude and `price` is per
unit.  Rows are returned per symbol, sorted by date (stable for equal dates, so
same-day rows keep file order).
"""
# stdlib imports
import csv
import datetime as _datetime
import logging
import operator
from typing import Any, Callable, Dict, List, Mapping, Optional


# local imports
from costbasis.inventory import InventoryType, Transaction


CsvDictRowRead = Mapping[str, Optional[str]]
TransactionsBySymbol = Dict[str, List[Transaction]]


class TransactionParseError(ValueError):
    """Exception raised when a CSV row can't be converted to a Transaction.

    Attributes:
        line: line number of the offending row in the CSV file.
        row: the offending row.
        msg: Error message detailing the failure.
    """

    def __init__(self, line: int, row: CsvDictRowRead, msg: str) -> None:
        self.line = line
        self.row = row
        self.msg = msg
        super(TransactionParseError, self).__init__(f"line {line}: {msg} in {row}")


class CsvTransactionReader(csv.DictReader):
    required = ("timestamp", "ttype", "symbol", "quantity", "price")

    def read(self) -> TransactionsBySymbol:
        output: TransactionsBySymbol = {}
        for row in self:
            symbol, transaction = self.read_row(row)
            output.setdefault(symbol, []).append(transaction)

        for symbol, transactions in output.items():
            transactions.sort(key=operator.attrgetter("date"))
            logging.info(f"Loaded {len(transactions)} transactions for {symbol}")
        return output

    def read_row(self, row: CsvDictRowRead):
        row = {(k or "").strip().lower(): v for k, v in row.items()}
        missing = [attr for attr in self.required if not row.get(attr)]
        if missing:
            raise TransactionParseError(
                self.line_num, row, f"missing {', '.join(missing)}"
            )
        try:
            attrs = {
                self.columns[column]: converter(self, row, column)
                for column, converter in self.converters.items()
            }
        except ValueError as err:
            raise TransactionParseError(self.line_num, row, str(err)) from err

        symbol = attrs.pop("symbol")
        return symbol, Transaction(**attrs)

    def convertString(self, row: CsvDictRowRead, attr: str) -> str:
        return self._convertItem(row, attr, str.strip)

    def convertFloat(self, row: CsvDictRowRead, attr: str) -> float:
        value = self._convertItem(row, attr, float)
        if value < 0:
            raise ValueError(f"{attr} must be an unsigned magnitude, not {value}")
        return value

    def convertDate(self, row: CsvDictRowRead, attr: str) -> _datetime.date:
        return self._convertItem(
            row, attr, lambda value: _datetime.date.fromisoformat(value.strip()[:10])
        )

    def convertType(self, row: CsvDictRowRead, attr: str) -> InventoryType:
        return self._convertItem(row, attr, InventoryType.from_token)

    def _convertItem(self, row: CsvDictRowRead, attr: str, fn: Callable) -> Any:
        return fn(row[attr])

    # CSV column -> Transaction attribute
    columns = {
        "timestamp": "date",
        "ttype": "itype",
        "symbol": "symbol",
        "quantity": "units",
        "price": "price",
    }

    converters = {
        "timestamp": convertDate,
        "ttype": convertType,
        "symbol": convertString,
        "quantity": convertFloat,
        "price": convertFloat,
    }


def read(filename: str) -> TransactionsBySymbol:
    """Read a CSV transaction log.

    Raises:
        TransactionParseError: if any row is malformed; nothing is returned.
    """
    with open(filename, newline="") as csvfile:
        return CsvTransactionReader(csvfile).read()
