"""Facturier: local-first invoicing and quoting for French businesses."""

__version__ = "1.0.0"
