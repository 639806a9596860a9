"""Shared FastAPI dependencies.

Services are constructed once in the application lifespan and stored on
`app.state`; these accessors hand them to request handlers.
"""

from fastapi import Request
from redis.asyncio import Redis

from authsvc.auth.jwt import TokenIssuer
from authsvc.auth.service import IdentityService
from authsvc.database import Database


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_redis(request: Request) -> Redis:
    return request.app.state.redis


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity_service


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer
