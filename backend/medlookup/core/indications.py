"""
Indications excerpt from a product's Ficha Técnica (technical data sheet) or
Prospecto (patient leaflet).

Section lookup is an ordered list of independent matchers; the first one that
returns text wins:
  1) Ficha Técnica numbering: "4.1" up to "4.2" / "4.3" / "5."
  2) Prospecto phrasing: "para qué se utiliza" up to the next numbered heading
  3) Bare "indicaciones" up to the next numbered heading
"""

import logging
import re
import unicodedata
from typing import Any, Callable, Dict, Optional, Tuple

from bs4 import BeautifulSoup, NavigableString

from medlookup.core.fetcher import fetch_text

logger = logging.getLogger("medlookup.indications")

DOC_FICHA_TECNICA = 1

INDICATIONS_MAX_CHARS = 1200
ELLIPSIS = "…"

# Tags after which a browser starts a new line in rendered text
_BLOCK_TAGS = [
    "p", "div", "section", "article", "header", "footer", "main", "aside",
    "h1", "h2", "h3", "h4", "h5", "h6", "li", "ul", "ol", "dl", "dt", "dd",
    "table", "tr", "caption", "blockquote", "pre", "hr", "form", "fieldset",
]

_FT_SECTION_RE = re.compile(r"4\.\s*1.*?(?=4\.\s*2|4\.\s*3|5\.)", re.IGNORECASE | re.DOTALL)
_UNTIL_NUMBERED_HEADING_RE = re.compile(r".*?(?=\n\s*\d+\s*\.)", re.DOTALL)


def strip_spaces(s: str) -> str:
    s = re.sub(r"[ \t]+\n", "\n", s)
    s = re.sub(r"\n{3,}", "\n\n", s)
    return s.strip()


def fold_accents(s: str) -> str:
    """
    Lower-case and drop diacritics, one output char per input char, so an
    index found in the folded string is valid in the original one.
    """
    out = []
    for ch in s:
        low = ch.lower()
        base = "".join(c for c in unicodedata.normalize("NFD", low) if not unicodedata.combining(c))
        out.append(base if len(base) == 1 else (low if len(low) == 1 else ch))
    return "".join(out)


def html_to_text(html: str) -> str:
    """Visible text of an HTML document, with line breaks roughly where a browser puts them."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "head", "noscript", "template"]):
        tag.decompose()

    root = soup.body or soup

    # Comments, doctype, CDATA are not rendered; plain text collapses whitespace like CSS does
    for node in list(root.find_all(string=True)):
        if type(node) is not NavigableString:
            node.extract()
            continue
        node.replace_with(re.sub(r"\s+", " ", str(node)))

    for br in root.find_all("br"):
        br.replace_with("\n")
    for tag in root.find_all(_BLOCK_TAGS):
        tag.insert_before("\n")
        tag.append("\n")

    text = root.get_text()
    text = re.sub(r"\n[ \t]+", "\n", text)
    return strip_spaces(text)


def _until_numbered_heading(rest: str) -> str:
    m = _UNTIL_NUMBERED_HEADING_RE.match(rest)
    return strip_spaces(m.group(0) if m else rest)


def _from_phrase(phrase: str) -> Callable[[str], Optional[str]]:
    def matcher(plain: str) -> Optional[str]:
        idx = fold_accents(plain).find(phrase)
        if idx < 0:
            return None
        return _until_numbered_heading(plain[idx:])

    return matcher


def match_ficha_tecnica(plain: str) -> Optional[str]:
    m = _FT_SECTION_RE.search(plain)
    if not m:
        return None
    out = m.group(0)
    idx = out.lower().find("indicaciones")
    if idx > -1:
        out = out[idx:]
    return strip_spaces(out)


match_prospecto = _from_phrase("para que se utiliza")
match_indicaciones = _from_phrase("indicaciones")

SECTION_MATCHERS: Tuple[Callable[[str], Optional[str]], ...] = (
    match_ficha_tecnica,
    match_prospecto,
    match_indicaciones,
)


def extract_indications_from_html(html: str) -> Optional[str]:
    plain = html_to_text(html)
    for matcher in SECTION_MATCHERS:
        found = matcher(plain)
        if found:
            return found
    return None


def truncate_text(text: str, max_chars: int = INDICATIONS_MAX_CHARS) -> str:
    """
    Cap `text` at `max_chars` (ellipsis included) without cutting a word:
    cut at the last space at or before max_chars - 10. A text with no space
    there is hard-cut.
    """
    if len(text) <= max_chars:
        return text
    cut = text.rfind(" ", 0, max_chars - 10 + 1)
    if cut > 0:
        return text[:cut].rstrip() + ELLIPSIS
    return text[:max_chars - len(ELLIPSIS)] + ELLIPSIS


def pick_doc_html(med: Optional[Dict[str, Any]], preferred_type: int = DOC_FICHA_TECNICA) -> Optional[Dict[str, Any]]:
    """First doc of `preferred_type` with an HTML url, else any doc with an HTML url."""
    docs = (med or {}).get("docs")
    if not isinstance(docs, list):
        return None

    usable = [d for d in docs if isinstance(d, dict) and d.get("urlHtml")]
    for d in usable:
        if d.get("tipo") == preferred_type:
            return d
    return usable[0] if usable else None


async def get_indications(med: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Best effort: any failure (no document, fetch error, parse error) gives None.
    """
    try:
        # Ficha Técnica first, else any HTML doc (Prospecto)
        chosen = pick_doc_html(med, DOC_FICHA_TECNICA)
        if not chosen:
            return None

        html = await fetch_text(chosen["urlHtml"])
        found = extract_indications_from_html(html)
        if not found:
            logger.info("No indications section found in %s", chosen["urlHtml"])
            return None
        return truncate_text(found)
    except Exception as e:
        logger.warning("Indications extraction failed: %r", e)
        return None
