from fastapi import Request

from talentmatch.services.db import RecordStore
from talentmatch.services.matching import MatchingOrchestrator


def get_orchestrator(request: Request) -> MatchingOrchestrator:
    return request.app.state.orchestrator


def get_store(request: Request) -> RecordStore:
    return request.app.state.store
