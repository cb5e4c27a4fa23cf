"""HTTP extraction layer.

This package fetches pipeline payloads over HTTP and derives request
bodies from pre-extraction responses through regex templates.
"""
