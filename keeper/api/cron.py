import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..core import Keeper
from ..core.execution import CallOutcome

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron/fluid-proposal")


def get_keeper(request: Request) -> Keeper:
    """The keeper built at startup."""
    return request.app.state.keeper


def _respond(outcome: CallOutcome) -> JSONResponse:
    return JSONResponse(
        status_code=200 if outcome.status else 400,
        content=outcome.to_dict(),
    )


@router.get("")
@router.get("/")
async def missing_function_name() -> JSONResponse:
    logger.error("Function Name is not set")
    return _respond(CallOutcome(status=False))


@router.get("/{function_name}")
async def call_function(function_name: str, keeper: Keeper = Depends(get_keeper)) -> JSONResponse:
    """Invoke `function_name()` on the proposals contract and report the outcome."""
    if not function_name.strip():
        return await missing_function_name()

    logger.info(f"Starting {function_name}...")
    status = await keeper.call(function_name)
    return _respond(CallOutcome(status=status))
