"""
Campus Placement & Training Portal

Modules:
- core: Configuration, authentication, errors and role scopes
- db: MongoDB connection
- services: Document store wrappers, eligibility and filter logic
- schemas: Request/Response schemas
- api: FastAPI routes
- utils: Upload handling and date helpers
"""

__version__ = "1.0.0"
