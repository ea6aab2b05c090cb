"""Expert consultation endpoints (per student)."""

from fastapi import APIRouter, Depends, HTTPException, status

from learnplan.core.consultations import (
    add_consultation,
    list_consultations,
    update_consultation,
)
from learnplan.core.models import StudentProfile
from learnplan.store.base import ProfileStore
from learnplan.web.dependencies import get_store, load_profile_record
from learnplan.web.schemas import ApiResponse, ConsultationCreate, ConsultationUpdate

router = APIRouter(prefix="/profile/{student_id}/consultations", tags=["consultations"])


@router.get("", response_model=ApiResponse)
def get_consultations(student_id: str, store: ProfileStore = Depends(get_store)) -> ApiResponse:
    """List a student's consultations, newest first."""
    profile = StudentProfile.from_dict(load_profile_record(store, student_id))
    return ApiResponse(data=list_consultations(profile))


@router.get("/{consultation_id}", response_model=ApiResponse)
def get_consultation(
    student_id: str,
    consultation_id: str,
    store: ProfileStore = Depends(get_store),
) -> ApiResponse:
    profile = StudentProfile.from_dict(load_profile_record(store, student_id))
    for consultation in list_consultations(profile):
        if consultation.get("id") == consultation_id:
            return ApiResponse(data=consultation)
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Consultation not found",
    )


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def create_consultation(
    student_id: str,
    payload: ConsultationCreate,
    store: ProfileStore = Depends(get_store),
) -> ApiResponse:
    """Request a consultation for a student."""
    profile = StudentProfile.from_dict(load_profile_record(store, student_id))
    consultation = add_consultation(profile, payload.to_record())
    store.update(student_id, profile.to_dict())
    return ApiResponse(data=consultation.to_dict())


@router.put("/{consultation_id}", response_model=ApiResponse)
def edit_consultation(
    student_id: str,
    consultation_id: str,
    payload: ConsultationUpdate,
    store: ProfileStore = Depends(get_store),
) -> ApiResponse:
    """Update status, feedback or other fields of a consultation."""
    profile = StudentProfile.from_dict(load_profile_record(store, student_id))
    consultation = update_consultation(profile, consultation_id, payload.to_record())
    store.update(student_id, profile.to_dict())
    return ApiResponse(data=consultation.to_dict())
