"""MT5 sync endpoint — pulls deal history and ingests it as journal entries."""

from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, HTTPException

from tradejournal.api.main import app_state
from tradejournal.errors import BrokerError, IngestionError
from tradejournal.ingest.sync import EPOCH, SyncJob
from tradejournal.models.base import DocumentModel

router = APIRouter(prefix="/api/users/{user_id}/mt5", tags=["mt5"])


class SyncRequest(DocumentModel):
    account: str
    from_time: datetime | None = None  # defaults to the epoch (full history)
    to_time: datetime | None = None  # defaults to now


@router.post("/sync")
async def sync_account(user_id: str, req: SyncRequest):
    """Fetch the account's deals and upload them as journal entries."""
    sync = app_state["sync"]
    job = SyncJob(
        user_id=user_id,
        account=req.account,
        from_time=req.from_time or EPOCH,
        to_time=req.to_time,
    )
    try:
        report = await sync.run(job)
    except BrokerError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except IngestionError as e:
        raise HTTPException(
            status_code=500,
            detail={"message": str(e), "failures": [asdict(f) for f in e.report.failures]},
        )

    upload = report.upload
    partial = upload is not None and not upload.ok
    return {
        "success": True,
        "message": (
            f"Synced with {len(upload.failures)} failed writes" if partial
            else "Synced MT5 account successfully"
        ),
        "data": asdict(report),
    }
