"""
HTTP API exposing the page store.
"""
