import re
from typing import Any, Dict, List, Optional, Pattern, Tuple

# Sub-fields that may carry the ingredient name inside principiosActivos[*]
ACTIVE_NAME_KEYS: Tuple[str, ...] = ("nombre", "principioActivo", "principio")

# Closed correction table, applied in order to lower-cased names.
# Not a spell checker: anything not listed passes through untouched.
ACCENT_FIXES: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"^(.+)\s+acido$"), r"ácido \1"),
    (re.compile(r"\bacido\b"), "ácido"),
    (re.compile(r"\bsodico\b"), "sódico"),
    (re.compile(r"\bpotasico\b"), "potásico"),
    (re.compile(r"\bclorhidrico\b"), "clorhídrico"),
    (re.compile(r"\bhidroxido\b"), "hidróxido"),
    (re.compile(r"\bacetilsalicilico\b"), "acetilsalicílico"),
)


def _active_name(entry: Any) -> str:
    if isinstance(entry, str):
        return entry.strip()
    if not isinstance(entry, dict):
        return ""
    for k in ACTIVE_NAME_KEYS:
        v = entry.get(k)
        if isinstance(v, str) and v.strip():
            return v.strip()
    return ""


def get_actives(med: Optional[Dict[str, Any]]) -> List[str]:
    """
    Active ingredient names from a CIMA record. First non-empty source wins:
      1) principiosActivos: [{nombre|principioActivo|principio}, ...]
      2) pactivos: "name, name"
      3) pactivos: {"nombre": ...}
    """
    if not med:
        return []

    items = med.get("principiosActivos")
    if isinstance(items, list) and items:
        names = [n for n in (_active_name(p) for p in items) if n]
        if names:
            return names

    pactivos = med.get("pactivos")
    if isinstance(pactivos, str) and pactivos.strip():
        return [pactivos.strip()]
    if isinstance(pactivos, dict) and pactivos.get("nombre"):
        return [str(pactivos["nombre"]).strip()]

    return []


def normalize_active_name(s: Optional[str]) -> Optional[str]:
    """
    "ACIDO  ACETILSALICILICO" -> "ácido acetilsalicílico"
    "valproico acido"         -> "ácido valproico"
    Idempotent on already-corrected names.
    """
    if not s:
        return s

    out = re.sub(r"\s+", " ", s.lower().strip())
    for pattern, repl in ACCENT_FIXES:
        out = pattern.sub(repl, out)
    return out


def format_actives(actives: Optional[List[str]]) -> str:
    return ", ".join(normalize_active_name(a) for a in (actives or []))
