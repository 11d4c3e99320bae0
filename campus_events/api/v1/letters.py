from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from campus_events.api.deps import get_db, get_current_actor
from campus_events.schemas.actor import Actor
from campus_events.schemas.letter import ApprovalLetter
from campus_events.services.letters import approval_letter

router = APIRouter()

@router.get("/{registration_id}", response_model=ApprovalLetter)
def get_approval_letter(
    registration_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Data for the approval letter; the PDF itself is rendered downstream."""
    return approval_letter(db, registration_id, actor)
