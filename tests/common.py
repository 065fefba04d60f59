# coding: utf-8
""" Reusable test elements """
# stdlib imports
import datetime


# local imports
from costbasis.inventory import OpenLot, RealizedMatch, Transaction


def date(text):
    return datetime.date.fromisoformat(text)


def tx(record):
    """'2020-01-01,long,100.0,25.0' -> Transaction"""
    return Transaction.from_string(record)


def lot(record):
    """'2020-01-01,100.0,-2500.0' -> OpenLot(date, quantity, basis)"""
    opendt, quantity, basis = record.split(",")
    return OpenLot(date(opendt), float(quantity), float(basis))


def match(record):
    """'2020-02-01,-100.0,3500.0,2020-01-01,-2500.0' -> RealizedMatch

    Fields are close date, quantity, proceeds, open date, cost; gain is computed.
    A sixth field, if present, overrides the gain (for adjusted matches).
    """
    fields = record.split(",")
    realized = RealizedMatch.new(
        close_date=date(fields[0]),
        quantity=float(fields[1]),
        close_basis=float(fields[2]),
        open_date=date(fields[3]),
        open_basis=float(fields[4]),
    )
    if len(fields) > 5:
        realized = realized._replace(gain=float(fields[5]))
    return realized
