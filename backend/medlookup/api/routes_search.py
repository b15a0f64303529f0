from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException

from medlookup.core.cima import candidate_nregistro, get_med_by_nregistro, search
from medlookup.core.fetcher import TransportError
from medlookup.core.indications import get_indications
from medlookup.schemas.search import CandidateItem, IndicationsResponse, SearchResponse

router = APIRouter(prefix="/v1", tags=["search"])


def _transport_error(e: TransportError) -> HTTPException:
    # CIMA (and the proxy) unreachable: bad gateway, not a client error
    return HTTPException(
        status_code=502,
        detail={"error": "cima_unreachable", "message": e.message, "url": e.url},
    )


def _to_candidate(r: Dict[str, Any]) -> CandidateItem:
    nombre = r.get("nombre")
    lab = r.get("labtitular")
    return CandidateItem(
        nombre=nombre if isinstance(nombre, str) else None,
        nregistro=candidate_nregistro(r),
        labtitular=lab if isinstance(lab, str) else None,
    )


@router.get("/search", response_model=SearchResponse)
async def search_by_name(q: str, num: int = 20):
    """
    CIMA name search with typo fallback. `used_variant` tells which spelling matched.
    """
    query = q.strip()
    if not query:
        raise HTTPException(status_code=422, detail={"error": "empty_query", "message": "q must not be empty"})

    try:
        outcome = await search(query)
    except TransportError as e:
        raise _transport_error(e)

    if not outcome.results:
        raise HTTPException(status_code=404, detail={"error": "not_found", "message": f"No CIMA match for {query!r}"})

    n = max(1, min(int(num), 100))
    candidates: List[CandidateItem] = [_to_candidate(r) for r in outcome.results[:n] if isinstance(r, dict)]
    return SearchResponse(query=query, used_variant=outcome.used_variant, candidates=candidates)


@router.get("/indications", response_model=IndicationsResponse)
async def indications(nregistro: str):
    try:
        med: Optional[Dict[str, Any]] = await get_med_by_nregistro(nregistro)
    except TransportError as e:
        raise _transport_error(e)

    if not med:
        raise HTTPException(status_code=404, detail={"error": "not_found", "message": f"Unknown nregistro {nregistro}"})

    nombre = med.get("nombre")
    return IndicationsResponse(
        nregistro=nregistro,
        nombre=nombre if isinstance(nombre, str) else None,
        indications=await get_indications(med),
    )
