from pydantic import BaseModel
from typing import Optional, List


class CandidateItem(BaseModel):
    nombre: Optional[str] = None
    nregistro: Optional[str] = None
    labtitular: Optional[str] = None


class SearchResponse(BaseModel):
    query: str
    used_variant: Optional[str] = None
    candidates: List[CandidateItem]


class IndicationsResponse(BaseModel):
    nregistro: str
    nombre: Optional[str] = None
    indications: Optional[str] = None
