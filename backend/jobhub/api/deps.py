from __future__ import annotations
from fastapi import Request

from jobhub.core.config import settings
from jobhub.db.database import SessionLocal
from jobhub.providers.base import ProviderAdapter
from jobhub.providers.registry import build_adapters
from jobhub.services.aggregation import Aggregator
from jobhub.services.presence import OnlineUsers


def get_adapters() -> list[ProviderAdapter]:
    return build_adapters(settings)


def get_aggregator() -> Aggregator:
    return Aggregator(SessionLocal, get_adapters(), cfg=settings)


def get_online_users(request: Request) -> OnlineUsers:
    return request.app.state.online_users
