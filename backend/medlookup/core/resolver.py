import logging
from typing import Any, Dict, Optional

from medlookup.core.actives import format_actives, get_actives, normalize_active_name
from medlookup.core.brand import derive_brand, format_brand_from_selection
from medlookup.core.cima import candidate_nregistro, get_med_by_nregistro, search
from medlookup.core.fetcher import TransportError
from medlookup.core.host import NO_INDICATIONS, DocumentHost, StatusSink
from medlookup.core.indications import get_indications
from medlookup.schemas.lookup import ResolutionResult

logger = logging.getLogger("medlookup.resolver")

# User-facing status lines (the add-in is used in Spanish)
MSG_SEARCHING = "Buscando..."
MSG_EMPTY_SELECTION = "Selecciona un nombre comercial."
MSG_NOT_FOUND = "No encontrado en CIMA."
MSG_NO_ACTIVES = "Sin principios activos en la respuesta."
MSG_DONE = "Listo."
MSG_SEARCHING_INDICATIONS = "Buscando indicaciones…"
MSG_NO_INDICATIONS = "No se pudieron extraer las indicaciones de la Ficha Técnica/Prospecto."
MSG_TRANSPORT_ERROR = "Error consultando CIMA. Revisa tu conexión."


class MedLookupError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(MedLookupError):
    """No candidates for the query, variants included."""


class NoIngredientsError(MedLookupError):
    """The resolved record carries no active ingredients."""


async def fetch_detail(candidate: Dict[str, Any]) -> Dict[str, Any]:
    """
    Detail record for a search candidate. Falls back to the candidate itself
    when it has no id, the detail is empty or the detail call fails.
    """
    nregistro = candidate_nregistro(candidate)
    if not nregistro:
        return candidate

    try:
        detail = await get_med_by_nregistro(nregistro)
    except TransportError as e:
        logger.warning("Detail fetch failed for nregistro=%s, using search record: %s", nregistro, e.message)
        return candidate

    return detail or candidate


async def resolve_selection(selected: str) -> ResolutionResult:
    """
    selection -> search (+ variants) -> detail -> brand + actives.

    Raises NotFoundError, NoIngredientsError or TransportError.
    """
    outcome = await search(selected)
    if not outcome.results:
        raise NotFoundError(f"No CIMA match for {selected!r}")

    med = await fetch_detail(outcome.results[0])

    actives = get_actives(med)
    if not actives:
        raise NoIngredientsError(f"No active ingredients for {med.get('nombre') or selected!r}")

    brand = derive_brand(med) or format_brand_from_selection(selected)
    return ResolutionResult(
        brand=brand,
        actives=[normalize_active_name(a) for a in actives],
        text=f"{brand} ({format_actives(actives)})",
        record=med,
        used_variant=outcome.used_variant,
    )


async def run_lookup(host: DocumentHost, sink: StatusSink) -> Optional[ResolutionResult]:
    """
    The add-in button: resolve the selection, write "Brand (actives)" over it,
    then show the indications excerpt. Returns None when the document was not
    changed; every outcome is reported through `sink`.
    """
    try:
        sink.set_status(MSG_SEARCHING)
        sink.set_indications(NO_INDICATIONS)

        selected = await host.read_selection_text()
        if not selected:
            sink.set_status(MSG_EMPTY_SELECTION)
            return None

        try:
            result = await resolve_selection(selected)
        except NotFoundError:
            sink.set_status(MSG_NOT_FOUND)
            return None
        except NoIngredientsError:
            sink.set_status(MSG_NO_ACTIVES)
            return None

        await host.replace_selection(result.text)
        sink.set_status(MSG_DONE)

        # Indications only go to the panel; failures never undo the replacement
        sink.set_status(MSG_SEARCHING_INDICATIONS)
        indications = await get_indications(result.record)
        sink.set_indications(indications or MSG_NO_INDICATIONS)
        sink.set_status(MSG_DONE)
        return result

    except TransportError as e:
        logger.error("CIMA lookup failed: %s", e.message)
        sink.set_status(MSG_TRANSPORT_ERROR)
        return None
