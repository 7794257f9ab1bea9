"""PACER — Goal API Routes."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from pacer.database import get_session
from pacer.analyzer.pipeline import compute_client_goals
from pacer.connectors.snapshot_store import SnapshotStore
from pacer.core.errors import InvalidArgument
from pacer.models.goal_models import GoalProgress
from pacer.core.logging import get_logger, log_timing

logger = get_logger("api.goals")

router = APIRouter(prefix="/clients/{client_id}/goals", tags=["Goals"])


@router.get("/progress", response_model=List[GoalProgress])
def get_goal_progress(client_id: str, session: Session = Depends(get_session)):
    """Progress, pacing and profit of every active goal.

    Recomputed on each call; completion is reported but never persisted.
    """
    try:
        with log_timing(logger, "goals/progress", client_id):
            return compute_client_goals(SnapshotStore(session), client_id)
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Goal progress failed: {e}", extra={"client_id": client_id})
        raise HTTPException(status_code=500, detail=f"Goal progress failed: {str(e)}")
