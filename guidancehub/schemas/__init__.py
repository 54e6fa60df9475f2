"""
Schemas module - Request/Response schemas for API endpoints.

All schemas live in guidancehub.schemas.schemas:
- Request schemas (what API accepts)
- Response schemas (what API returns)
- Enums shared by routes and services
"""
