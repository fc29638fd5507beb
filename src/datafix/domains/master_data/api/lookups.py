# src/datafix/domains/master_data/api/lookups.py
"""
Master Data API Routes

Active branches and features for the ticket form's selection inputs.
"""

from fastapi import APIRouter, Depends

from ....api.deps import get_current_session
from ....api.responses import success_response
from ....auth.session import UserSession
from ....repositories import get_master_data_repository

router = APIRouter()


@router.get("/branches")
def list_branches(session: UserSession = Depends(get_current_session)):
    """Active branches, alphabetical."""
    branches = get_master_data_repository().get_branches()
    return success_response([b.to_dict() for b in branches])


@router.get("/features")
def list_features(session: UserSession = Depends(get_current_session)):
    """Active features in creation order."""
    features = get_master_data_repository().get_features()
    return success_response([f.to_dict() for f in features])
