from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from mentormatch.models.profile import Profile
from mentormatch.schemas.discovery import DiscoveryErrorOut, DiscoveryRequest, DiscoveryResponse
from mentormatch.schemas.repository import RepositoryOut
from mentormatch.services.auth import get_current_user
from mentormatch.services.discovery import (
    DiscoveryError,
    DiscoveryErrorKind,
    DiscoveryPreferences,
    RepositoryDiscovery,
    get_discovery_service,
)
from mentormatch.store import MentorStore, get_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/discovery", tags=["Discovery"])

ERROR_STATUS = {
    DiscoveryErrorKind.RATE_LIMITED: 429,
    DiscoveryErrorKind.QUOTA_EXHAUSTED: 402,
    DiscoveryErrorKind.TRANSIENT: 502,
    DiscoveryErrorKind.VALIDATION: 422,
}


@router.post(
    "/recommendations",
    response_model=DiscoveryResponse,
    responses={code: {"model": DiscoveryErrorOut} for code in ERROR_STATUS.values()},
)
def recommend_repositories(
    payload: DiscoveryRequest,
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
    discovery: RepositoryDiscovery = Depends(get_discovery_service),
):
    prefs = DiscoveryPreferences(**payload.model_dump())
    try:
        result = discovery.recommend(prefs, store.list_repositories())
    except DiscoveryError as e:
        logger.warning(f"Discovery failed for user {current_user.id}: {e.kind.value}")
        return JSONResponse(
            status_code=ERROR_STATUS[e.kind],
            content={"detail": e.message, "error": e.kind.value},
        )
    return DiscoveryResponse(
        repositories=result.repositories,
        reasoning=result.reasoning,
        matches=[RepositoryOut.model_validate(repo) for repo in result.matched],
        model=result.model,
    )
