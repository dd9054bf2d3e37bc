"""
Schemas module - Request/Response schemas for API endpoints.

Stored documents are plain dicts (see services/); these models are the
API contract (what clients send and receive).
"""
