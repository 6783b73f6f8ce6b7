"""
Dockit licensing core.

Vendor licences, station premium subscriptions, the settlement ledger and
the refund queue behind the Dockit admin and merchant dashboards.
"""

__version__ = "0.1.0"
