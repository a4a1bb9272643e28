"""Dashboard service package.

Layout:
- ``api``: HTTP endpoints for listings, category pages, snapshot and admin.
- ``upstream``: client for the upstream model listing.
- ``polling``: background refresh loop holding the latest listing.
- ``admin``: registry of administrative commands.
- ``runtime``: service-local metrics and runtime helpers.
"""
