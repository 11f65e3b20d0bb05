"""Strict DER parsing and signed-data verification for Web PKI."""

__version__ = "0.1.0"