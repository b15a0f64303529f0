"""
Pytest fixtures for the MedLookup backend.

No test touches the network: the CIMA JSON endpoints and the FT/Prospecto
HTML fetch are replaced by in-memory fakes that also record every URL asked for.
"""

import os
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

import pytest

os.environ.setdefault("LOG_LEVEL", "WARNING")

from medlookup.core import cima, indications  # noqa: E402
from medlookup.core.fetcher import TransportError  # noqa: E402

FT_URL = "https://cima.aemps.es/cima/dochtml/ft/62825/FT_62825.html"

ADIRO_CANDIDATE = {
    "nregistro": "62825",
    "nombre": "ADIRO 100 mg COMPRIMIDOS GASTRORRESISTENTES EFG",
    "labtitular": "Bayer Hispania, S.L.",
    "pactivos": "ACIDO ACETILSALICILICO",
}

ADIRO_DETAIL = {
    "nregistro": "62825",
    "nombre": "ADIRO 100 MG COMPRIMIDOS GASTRORRESISTENTES EFG",
    "principiosActivos": [{"id": 1, "codigo": "1", "nombre": "acido acetilsalicilico", "cantidad": "100"}],
    "docs": [
        {"tipo": 2, "url": "https://cima.aemps.es/cima/pdfs/p/62825/P_62825.pdf",
         "urlHtml": "https://cima.aemps.es/cima/dochtml/p/62825/P_62825.html"},
        {"tipo": 1, "url": "https://cima.aemps.es/cima/pdfs/ft/62825/FT_62825.pdf", "urlHtml": FT_URL},
    ],
}

ADIRO_FT_HTML = """<!DOCTYPE html>
<html>
<head><title>Ficha técnica ADIRO</title><style>p { margin: 0 }</style></head>
<body>
  <h1>1. NOMBRE DEL MEDICAMENTO</h1>
  <p>Adiro 100 mg comprimidos gastrorresistentes EFG</p>
  <h2>4. DATOS CLÍNICOS</h2>
  <h3>4.1. Indicaciones terapéuticas</h3>
  <p>Reducción del riesgo de
     morbilidad y mortalidad en pacientes que han sufrido previamente un infarto de miocardio.</p>
  <!-- section end -->
  <h3>4.2. Posología y forma de administración</h3>
  <p>Adultos: un comprimido al día.</p>
</body>
</html>
"""


class FakeCima:
    """Stands in for fetch_json: answers CIMA search/detail URLs from dicts."""

    def __init__(self):
        self.search_responses: Dict[str, Any] = {}
        self.detail_responses: Dict[str, Any] = {}
        self.calls: List[str] = []
        self.fail_search = False
        self.fail_detail = False

    @property
    def searched(self) -> List[str]:
        out = []
        for url in self.calls:
            u = urlparse(url)
            if u.path.endswith("/medicamentos"):
                out.append(parse_qs(u.query)["nombre"][0])
        return out

    async def fetch_json(self, url: str, timeout: Optional[float] = None, **kwargs) -> Any:
        self.calls.append(url)
        u = urlparse(url)
        qs = parse_qs(u.query)
        if u.path.endswith("/medicamentos"):
            if self.fail_search:
                raise TransportError(f"Request failed: {url}", url=url)
            return self.search_responses.get(qs["nombre"][0].lower(), {"totalFilas": 0, "resultados": []})
        if u.path.endswith("/medicamento"):
            if self.fail_detail:
                raise TransportError(f"Request failed: {url}", url=url)
            return self.detail_responses.get(qs["nregistro"][0], {})
        raise AssertionError(f"unexpected URL {url}")


class FakeDocs:
    """Stands in for fetch_text: serves HTML by URL."""

    def __init__(self):
        self.pages: Dict[str, str] = {}
        self.calls: List[str] = []
        self.fail = False

    async def fetch_text(self, url: str, timeout: Optional[float] = None, **kwargs) -> str:
        self.calls.append(url)
        if self.fail or url not in self.pages:
            raise TransportError(f"Request failed: {url}", url=url)
        return self.pages[url]


@pytest.fixture
def fake_cima(monkeypatch):
    fake = FakeCima()
    monkeypatch.setattr(cima, "fetch_json", fake.fetch_json)
    return fake


@pytest.fixture
def fake_docs(monkeypatch):
    fake = FakeDocs()
    monkeypatch.setattr(indications, "fetch_text", fake.fetch_text)
    return fake


@pytest.fixture
def adiro(fake_cima, fake_docs):
    fake_cima.search_responses["adiro"] = {"totalFilas": 1, "pagina": 1, "resultados": [ADIRO_CANDIDATE]}
    fake_cima.detail_responses["62825"] = ADIRO_DETAIL
    fake_docs.pages[FT_URL] = ADIRO_FT_HTML
    return fake_cima
