"""
Risk Assessment API — storage of finished PSI results.

Failure to persist is non-fatal for the patient: the node has already
computed and returned the score before it calls POST /risk-assessments.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas.psi import RiskAssessmentCreated, RiskAssessmentIn, RiskAssessmentOut
from app.services.risk_assessment_service import RiskAssessmentStore, get_assessment_store

router = APIRouter(prefix="/risk-assessments", tags=["Risk Assessments"])


@router.post("", response_model=RiskAssessmentCreated, status_code=status.HTTP_201_CREATED)
def create_assessment(
    payload: RiskAssessmentIn,
    store: RiskAssessmentStore = Depends(get_assessment_store),
) -> RiskAssessmentCreated:
    record = store.create_assessment(payload)
    return RiskAssessmentCreated(id=record.id, created_at=record.created_at)


@router.get("/assessment/{assessment_id}", response_model=RiskAssessmentOut)
def get_assessment(
    assessment_id: str,
    store: RiskAssessmentStore = Depends(get_assessment_store),
) -> RiskAssessmentOut:
    record = store.get_assessment_by_id(assessment_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "ASSESSMENT_NOT_FOUND", "message": f"No assessment {assessment_id}"},
        )
    return record


@router.get("/{subject_id}", response_model=List[RiskAssessmentOut])
def list_assessments(
    subject_id: str,
    store: RiskAssessmentStore = Depends(get_assessment_store),
) -> List[RiskAssessmentOut]:
    """All assessments for a subject, newest first."""
    return store.get_assessments_by_subject(subject_id)


@router.get("/{subject_id}/latest", response_model=RiskAssessmentOut)
def latest_assessment(
    subject_id: str,
    store: RiskAssessmentStore = Depends(get_assessment_store),
) -> RiskAssessmentOut:
    record = store.get_latest_assessment(subject_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "ASSESSMENT_NOT_FOUND", "message": f"No assessments for {subject_id}"},
        )
    return record


@router.delete("/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assessment(
    assessment_id: str,
    store: RiskAssessmentStore = Depends(get_assessment_store),
) -> None:
    if not store.delete_assessment(assessment_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "ASSESSMENT_NOT_FOUND", "message": f"No assessment {assessment_id}"},
        )
