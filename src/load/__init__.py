"""Warehouse loading layer.

This package reads the CSV header off the transformed stream and loads
the remaining rows into the destination table.
"""
