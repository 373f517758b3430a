"""HTTP surface.

REST routes (just /health) are aggregated on api_router here; the GraphQL
endpoint is built in taskboard.api.schema and mounted at /graphql in
main.py. Both are open at the HTTP level: authorization happens per
operation inside the services.
"""

from fastapi import APIRouter

from taskboard.api.health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
