import re
from typing import Any, Dict, FrozenSet, List, Optional

# Pharmaceutical form / route / release descriptors that end the brand part of
# an official name ("ADIRO 100 MG COMPRIMIDOS GASTRORRESISTENTES EFG").
FORM_STOP_WORDS: FrozenSet[str] = frozenset({
    "COMPRIMIDOS", "COMPRIMIDO", "CAPSULAS", "CÁPSULAS", "CAPSULA", "CÁPSULA", "EFG", "TURBUHALER",
    "AEROSOL", "INHALADOR", "INHALACIÓN", "INHALACION", "SOLUCIÓN", "SOLUCION", "SUSPENSIÓN", "SUSPENSION",
    "JARABE", "TABLETAS", "TABLETA", "TAB", "VIAL", "VIALES", "RETARD", "SR", "ER", "XR", "MR",
    "LIBERACIÓN", "LIBERACION", "RECUBIERTOS", "RECUBIERTO", "GASTRORRESISTENTES", "DISPERSABLE",
    "DISPERSABLES", "COLIRIO", "PARCHES", "PARCHE", "SPRAY", "CREMA", "GOTAS", "POLVO", "SOBRES",
    "UNIDOSIS", "SOLUBLE", "ORAL", "NASAL", "OFTÁLMICA", "OFTALMICA",
})

# Upper-cased unit tokens ("µ".upper() is Greek "Μ", so both spellings are listed)
UNIT_TOKENS: FrozenSet[str] = frozenset({
    "MG", "MCG", "ΜG", "UG", "µG", "G", "ML", "%", "IU", "UI",
})

# 500 / 2,5 / 875/125 / 0.4/0.2
DOSE_RE = re.compile(r"^\d+([.,]\d+)?(/\d+([.,]\d+)?)?$")


def title_case_word(w: str) -> str:
    return w[0].upper() + w[1:].lower() if w else w


def _ends_brand(token: str) -> bool:
    t = token.upper()
    return (
        t[:1].isdigit()
        or bool(DOSE_RE.match(t))
        or t in UNIT_TOKENS
        or t in FORM_STOP_WORDS
    )


def derive_brand(med: Optional[Dict[str, Any]]) -> str:
    """
    Brand from the official name: keep tokens up to the first dose, unit or
    form descriptor, then title-case them.

    "IBUPROFENO 600 MG COMPRIMIDOS RECUBIERTOS EFG" -> "Ibuprofeno"
    "PARACETAMOL"                                   -> "Paracetamol"
    """
    raw = str((med or {}).get("nombre") or "").strip()
    if not raw:
        return ""

    tokens = raw.split()
    chosen: List[str] = []
    for t in tokens:
        if _ends_brand(t):
            break
        chosen.append(t)

    base = chosen or tokens[:1]
    return " ".join(title_case_word(t) for t in base)


def format_brand_from_selection(selection: Optional[str]) -> str:
    trimmed = (selection or "").strip()
    if not trimmed:
        return ""
    return " ".join(title_case_word(t) for t in trimmed.split())
