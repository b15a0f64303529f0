from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class SearchOutcome(BaseModel):
    query: str
    results: List[Dict[str, Any]] = Field(default_factory=list)
    used_variant: Optional[str] = None  # None when the exact query matched


class ResolutionResult(BaseModel):
    brand: str                   # e.g. "Adiro"
    actives: List[str]           # normalized, registry order
    text: str                    # e.g. "Adiro (ácido acetilsalicílico)"
    record: Dict[str, Any]       # detail record (or the search candidate)
    used_variant: Optional[str] = None


class LookupRequest(BaseModel):
    selection: str


class LookupResponse(BaseModel):
    selection: str
    replacement: Optional[str] = None   # None when the document was not touched
    brand: Optional[str] = None
    actives: List[str] = Field(default_factory=list)
    used_variant: Optional[str] = None
    indications: str = "—"
    status: str
    status_history: List[str] = Field(default_factory=list)
