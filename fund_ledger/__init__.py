"""Fund accounting ledger for nonprofit and church organizations."""

__version__ = "0.1.0"
