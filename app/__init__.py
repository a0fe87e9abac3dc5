"""Wanderlist: travel destination catalog API with session auth and owner/admin access control."""

__version__ = "0.1.0"
