"""Routes validating and executing run merges."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_session, raise_http_error
from ..errors import AnalyserError
from ..merge import execute_merge, validate_merge
from ..schemas.runs import MergeExecuteResponse, MergeRequest, MergeValidationResponse

router = APIRouter(prefix="/runs/merge", tags=["merge"])


@router.post("/validate", response_model=MergeValidationResponse)
async def validate_runs_merge(
    payload: MergeRequest,
    session: AsyncSession = Depends(get_session),
) -> MergeValidationResponse:
    """Report whether the selected runs can be merged, or why not."""

    try:
        result = await validate_merge(session, payload.run_ids)
    except AnalyserError as exc:
        raise_http_error(exc)
    return MergeValidationResponse.model_validate(result)


@router.post("/execute", response_model=MergeExecuteResponse)
async def execute_runs_merge(
    payload: MergeRequest,
    session: AsyncSession = Depends(get_session),
) -> MergeExecuteResponse:
    try:
        result = await execute_merge(
            session,
            payload.run_ids,
            name=payload.merged_run_name,
            description=payload.merged_run_description,
        )
    except AnalyserError as exc:
        raise_http_error(exc)
    return MergeExecuteResponse.model_validate(result)
