"""API subpackage for the dashboard service.

Routers expose the model listings, category pages, the poller snapshot and
admin actions. Transport layer remains thin and delegates to ``libs.catalog``.
"""
