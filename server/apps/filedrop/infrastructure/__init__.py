"""Infrastructure layer for filedrop app.

This package contains integrations with external systems:
- Blob storage backend on the local filesystem (content root)
- Metadata index on the relational database

Keep infrastructure concerns separate from the transfer logic.
"""
