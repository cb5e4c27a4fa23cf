"""Stream tweaks.

This package holds the single-input, single-output byte stream transforms
applied between the HTTP fetch and the table load.
"""
