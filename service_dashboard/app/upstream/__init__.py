"""Upstream listing client and its error types."""
