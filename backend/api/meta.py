from fastapi import APIRouter

from formatting import ROLE_LABELS, all_status_badges
from schemas import LabelsResponse

router = APIRouter(prefix="/api/meta", tags=["meta"])


@router.get("/labels", response_model=LabelsResponse)
async def read_labels() -> LabelsResponse:
    return LabelsResponse(statuts=all_status_badges(), roles=dict(ROLE_LABELS))
