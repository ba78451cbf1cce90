"""Business logic layer for filedrop app.

This package contains the upload and download protocols:
- Upload: mint identifier, write blob, insert index record, build URL
- Download: look up record, open blob, pick the offered filename

All transfer logic should be implemented here, separate from
models (data layer), infrastructure (external systems) and views.
"""
