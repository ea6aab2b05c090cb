"""Request dependencies: services created by the app factory."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from learnplan.config import AppConfig
from learnplan.core.plan_generator import PlanGenerator
from learnplan.search.client import ResourceSearchClient
from learnplan.store.base import ProfileStore


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_store(request: Request) -> ProfileStore:
    return request.app.state.store


def get_search_client(request: Request) -> ResourceSearchClient:
    return request.app.state.search_client


def get_plan_generator(request: Request) -> PlanGenerator:
    return request.app.state.plan_generator


def load_profile_record(store: ProfileStore, student_id: str) -> dict:
    """Stored profile record or a 404."""
    record = store.get(student_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student profile not found",
        )
    return record
