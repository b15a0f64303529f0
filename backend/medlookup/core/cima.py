"""
CIMA (AEMPS) registry client.

- to_list(): one place that flattens the registry's response shapes
- search_meds_by_name() / get_med_by_nregistro(): the two REST endpoints
- search_variants() / search(): typo-tolerant lookup (first hit wins, no ranking)
"""

import logging
import re
from typing import Any, Dict, Iterator, List, Optional, Set
import httpx

from medlookup.core.config import settings
from medlookup.core.fetcher import fetch_json
from medlookup.schemas.lookup import SearchOutcome

logger = logging.getLogger("medlookup.cima")

# Paginated / wrapped list keys, in the order they are checked
LIST_KEYS = ("resultados", "lista", "datos")

# Registry id key preference (order matters, keep as is)
NREGISTRO_KEYS = ("nregistro", "nregistroId", "id")

# Whole-string substitutions for common Spanish spelling confusions, tried in order
VARIANT_RULES = (
    ("y", "i"),
    ("i", "y"),
    ("z", "s"),
    ("s", "z"),
    ("v", "b"),
    ("b", "v"),
    ("h", ""),
)


def to_list(resp: Any) -> List[Dict[str, Any]]:
    """
    Normalize a registry response to a list of records:
      [...]                    -> as is
      {"resultados": [...]}    -> paginated search
      {"lista": [...]}         -> wrapped list
      {"datos": [...]}         -> wrapped list
      {"nombre": ...}          -> single record
      anything else            -> []
    """
    if isinstance(resp, list):
        return resp
    if not isinstance(resp, dict):
        return []
    for k in LIST_KEYS:
        if isinstance(resp.get(k), list):
            return resp[k]
    if resp.get("nombre"):
        return [resp]
    return []


def candidate_nregistro(record: Dict[str, Any]) -> Optional[str]:
    for k in NREGISTRO_KEYS:
        v = record.get(k)
        if v:
            return str(v)
    return None


def _records(resp: Any) -> List[Dict[str, Any]]:
    # Entries that are not objects (null, bare strings) carry no usable record
    return [r for r in to_list(resp) if isinstance(r, dict)]


async def search_meds_by_name(name: str) -> List[Dict[str, Any]]:
    url = httpx.URL(f"{settings.CIMA_BASE}/cima/rest/medicamentos", params={"nombre": name})
    logger.debug("CIMA search: %s", name)
    return _records(await fetch_json(str(url)))


async def get_med_by_nregistro(nregistro: str) -> Optional[Dict[str, Any]]:
    """Detail record (principiosActivos + docs) for one registry id, or None."""
    url = httpx.URL(f"{settings.CIMA_BASE}/cima/rest/medicamento", params={"nregistro": nregistro})
    records = _records(await fetch_json(str(url)))
    return records[0] if records else None


def search_variants(query: str) -> Iterator[str]:
    """
    Alternate spellings of `query`, in the order they should be tried:
    letter swaps first, then every single-character deletion (left to right).
    Never yields the same string twice (case-insensitive), nor the query itself.
    """
    seen: Set[str] = {query.lower()}

    def fresh(v: str) -> bool:
        key = v.lower()
        if not key.strip() or key in seen:
            return False
        seen.add(key)
        return True

    for src, dst in VARIANT_RULES:
        v = re.sub(src, dst, query, flags=re.IGNORECASE)
        if v != query and fresh(v):
            yield v

    for i in range(len(query)):
        v = query[:i] + query[i + 1:]
        if fresh(v):
            yield v


async def try_search_variants(query: str) -> Optional[SearchOutcome]:
    for v in search_variants(query):
        results = await search_meds_by_name(v)
        if results:
            logger.info("CIMA search for %r matched variant %r", query, v)
            return SearchOutcome(query=query, results=results, used_variant=v)
    return None


async def search(query: str) -> SearchOutcome:
    """
    Exact search first; only when it returns nothing fall back to variants.
    An empty `results` means nothing was found.
    """
    results = await search_meds_by_name(query)
    if results:
        return SearchOutcome(query=query, results=results)

    alt = await try_search_variants(query)
    if alt:
        return alt

    logger.info("CIMA search for %r found nothing (variants exhausted)", query)
    return SearchOutcome(query=query, results=[])
