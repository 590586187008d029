"""Service layer for the Loom API.

Services hold the read-path logic. Routes stay transport-only and call
exactly one service function per request.
"""
