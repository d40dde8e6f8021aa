"""Adapters: JSON entry points, report formatting and tabular validation."""
