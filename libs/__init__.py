"""Shared libraries for ModelBoard.

Subpackages:
- ``libs.common``: configuration, logging, metrics, and tracing.
- ``libs.catalog``: model listing normalization, ranking and views.

Notes:
- Avoid service-specific logic; keep modules cohesive and broadly useful.
"""
