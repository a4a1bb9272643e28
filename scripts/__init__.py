"""Utility scripts for operating ModelBoard.

Scripts include:
- ``snapshot_models.py``: fetch the upstream listing once and print it normalized.
"""
