"""Pipeline orchestration.

This package wires pre-extraction, extraction, tweaks, header parsing,
and loading into one run.
"""
