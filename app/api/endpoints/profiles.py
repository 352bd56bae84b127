from typing import Any

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from app.api.deps import get_current_identity, get_profile_service
from app.core.constants import MESSAGE_PROFILE_COMPLETE, MESSAGE_PROFILE_SAVED
from app.core.exceptions import InvalidInput
from app.models.profile import Identity
from app.services.profile.service import ProfileService, SubmitStatus
from app.utils import extract_titles

router = APIRouter(prefix="/api", tags=["profiles"])


class SubmitTitlesRequest(BaseModel):
    serviceType: str | None = Field(default=None, description="Which service the titles were exported from")
    titles: list[str] | None = Field(default=None, description="Titles the user rated")
    data: list[dict[str, Any]] | None = Field(
        default=None, description="Raw viewing-history export, used when titles is not given"
    )
    displayName: str | None = Field(default=None, description="Name shown to matched users")


class SubmitTitlesResponse(BaseModel):
    message: str
    status: SubmitStatus


@router.post("/data", response_model=SubmitTitlesResponse, status_code=status.HTTP_201_CREATED)
async def submit_titles(
    payload: SubmitTitlesRequest,
    response: Response,
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
) -> SubmitTitlesResponse:
    if not payload.serviceType:
        raise InvalidInput("Service type is required")

    titles = payload.titles
    if titles is None:
        if payload.data is None:
            raise InvalidInput("Provide titles or a data export")
        titles = extract_titles(payload.data)

    result = await service.submit_titles(identity, payload.serviceType, titles, payload.displayName)

    if result.status is SubmitStatus.ALREADY_COMPLETE:
        response.status_code = status.HTTP_200_OK
        return SubmitTitlesResponse(message=MESSAGE_PROFILE_COMPLETE, status=result.status)
    return SubmitTitlesResponse(message=MESSAGE_PROFILE_SAVED, status=result.status)
