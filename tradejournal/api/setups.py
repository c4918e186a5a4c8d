"""Setup endpoints — metrics snapshot and journal entry assignment."""

from fastapi import APIRouter, HTTPException

from tradejournal.analytics.setup_metrics import assign_entry_to_setup, get_setup_metrics
from tradejournal.api.main import app_state
from tradejournal.errors import DocumentNotFoundError, SetupNotFoundError

router = APIRouter(prefix="/api/users/{user_id}/setups", tags=["setups"])


@router.get("/{setup_id}/metrics")
async def setup_metrics(user_id: str, setup_id: str):
    """Core, consistency and execution-quality metrics over the setup's closed trades."""
    store = app_state["store"]
    try:
        snapshot = await get_setup_metrics(store, user_id, setup_id)
    except SetupNotFoundError:
        raise HTTPException(status_code=404, detail="Setup document not found in database")
    return {
        "success": True,
        "message": "Successfully calculated setup metrics",
        "data": snapshot.to_document(),
    }


@router.put("/{setup_id}/entries/{journal_entry_id}")
async def assign_journal_entry(user_id: str, setup_id: str, journal_entry_id: str):
    store = app_state["store"]
    try:
        setup = await assign_entry_to_setup(store, user_id, journal_entry_id, setup_id)
    except SetupNotFoundError:
        raise HTTPException(status_code=404, detail="Setup document not found in database")
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Journal entry document not found in database")
    return {
        "success": True,
        "message": "Journal entry assigned to setup",
        "data": setup.to_document(),
    }
