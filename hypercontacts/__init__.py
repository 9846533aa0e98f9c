"""Contacts service serving Hyperview XML screens and a JSON API over WSGI."""

__version__ = "0.1.0"