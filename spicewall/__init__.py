"""Spicewall - backend descriptors for a multi-backend wallpaper fetcher.

Each remote image provider ("backend") is described by an immutable
BackendDescriptor: its service name, the preference keys it owns and the
rules deciding whether an API key, a saved search URL or a query description
is acceptable. The descriptors are consumed by the preference store, the
saved-query list and the API key checker.
"""
