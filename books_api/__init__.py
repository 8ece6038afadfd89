"""
FastAPI REST API for managing book records stored in MongoDB.

This package provides:
- Create, list, get, update and delete endpoints for books
- A Motor-backed store with classified driver errors
- Uniform JSON error responses
"""
