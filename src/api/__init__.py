"""FastAPI routes and endpoints.

Endpoints:
- GET /health, GET /ready: liveness and readiness (verse store loaded)
- POST /api/v1/guidance/ask: verse-grounded guidance
- POST /api/v1/keywords, GET /api/v1/verses/...: retrieval and lookups
- POST /api/v1/spiritual/ask|chat: free-form guidance
"""
