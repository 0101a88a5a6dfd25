"""Storage and versioning layer.

This package persists versioned form content and schemas and
status-tracked form responses on top of a blob bucket.
"""
