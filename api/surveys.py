"""Survey API routers.

`router` manages survey definitions and which survey is active per creator;
`responses_router` accepts and lists submitted answers.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends

from core.logger import get_logger
from database.deps import get_response_store, get_survey_store
from database.survey_store import SurveyResponseStore, SurveyStore
from schemas.survey_schema import SurveyAnswersRequest, SurveyAnswersResponse, SurveyRequest, SurveyResponse

logger = get_logger("api.surveys")
router = APIRouter(prefix="/api/surveys", tags=["surveys"])
responses_router = APIRouter(prefix="/api/survey-responses", tags=["surveys"])


@router.get("", response_model=List[SurveyResponse])
def list_surveys(creator_id: Optional[str] = None, store: SurveyStore = Depends(get_survey_store)):
    """Return surveys, newest first, optionally only those of one creator."""
    return store.list_surveys(creator_id=creator_id)


@router.post("", response_model=SurveyResponse, status_code=201)
def create_survey(payload: SurveyRequest, store: SurveyStore = Depends(get_survey_store)):
    return store.save(payload)


@router.get("/active", response_model=Optional[SurveyResponse])
def get_active_survey(creator_id: Optional[str] = None, store: SurveyStore = Depends(get_survey_store)):
    """Return the active survey, or null when none is active."""
    return store.get_active(creator_id=creator_id)


@router.get("/{survey_id}", response_model=SurveyResponse)
def get_survey(survey_id: str, store: SurveyStore = Depends(get_survey_store)):
    return store.get(survey_id)


@router.put("/{survey_id}", response_model=SurveyResponse)
def save_survey(survey_id: str, payload: SurveyRequest, store: SurveyStore = Depends(get_survey_store)):
    """Create or replace the survey with this id, questions included."""
    return store.save(payload, survey_id=survey_id)


@router.post("/{survey_id}/toggle-active", response_model=SurveyResponse)
def toggle_survey_active(survey_id: str, store: SurveyStore = Depends(get_survey_store)):
    """Activate the survey (deactivating the creator's others), or deactivate it if active.

    Raises:
        NotFoundError: If no survey has this id.
    """
    return store.toggle_active(survey_id)


@router.delete("/{survey_id}", status_code=204)
def delete_survey(survey_id: str, store: SurveyStore = Depends(get_survey_store)):
    store.delete(survey_id)


@responses_router.post("", response_model=SurveyAnswersResponse, status_code=201)
def submit_survey_response(payload: SurveyAnswersRequest, store: SurveyResponseStore = Depends(get_response_store)):
    return store.submit(payload)


@responses_router.get("", response_model=List[SurveyAnswersResponse])
def list_survey_responses(owner_id: Optional[str] = None, store: SurveyResponseStore = Depends(get_response_store)):
    return store.list_responses(owner_id=owner_id)


@responses_router.delete("/{response_id}", status_code=204)
def delete_survey_response(response_id: str, store: SurveyResponseStore = Depends(get_response_store)):
    store.delete(response_id)
