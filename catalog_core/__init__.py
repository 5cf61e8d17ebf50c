"""
Multi-tenant catalog resolution and override engine.

Global catalog items are shared by every tenant; tenants add their own items,
switch globals on and off for themselves, and attach per-locale translation
overlays. See ``resolver.CatalogResolver`` for the client-side contract and
``services.CatalogService`` for the server side.
"""

__version__ = "0.1.0"
