from fastapi import APIRouter, HTTPException

from medlookup.core.host import SelectionBuffer, StatusLog
from medlookup.core.resolver import run_lookup
from medlookup.schemas.lookup import LookupRequest, LookupResponse

router = APIRouter(prefix="/v1", tags=["lookup"])


@router.post("/lookup", response_model=LookupResponse)
async def lookup(body: LookupRequest):
    """
    Runs the add-in action against the posted selection.
    Always 200 for domain outcomes (not found, no actives, CIMA down): the
    add-in shows `status` as is. `replacement` is null when nothing should be written.
    """
    host = SelectionBuffer(body.selection)
    sink = StatusLog()

    try:
        result = await run_lookup(host, sink)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail={"error": "lookup_failed", "message": str(e), "status_history": sink.history},
        )

    return LookupResponse(
        selection=body.selection,
        replacement=host.replaced,
        brand=result.brand if result else None,
        actives=result.actives if result else [],
        used_variant=result.used_variant if result else None,
        indications=sink.indications,
        status=sink.status,
        status_history=sink.history,
    )
