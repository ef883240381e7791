"""
Registry results page parser.

Expected page structure:
  form[name="captcha"]   present only when the registry serves a CAPTCHA wall
  .classe-nice           Nice class label for the search (optional)
  .resultado-busca       summary text; the first integer is the total hit count
  .tabela-processo tr    results table; row 0 is the header

Results table columns (left to right):
  0: Process number (registry id)
  1: Mark name
  2: Status
  3: Owner
  4: Mark type (not always present)
"""
import re

from bs4 import BeautifulSoup

from models import DEFAULT_MARK_TYPE, CandidateMark, SearchQuery, SearchResult

CAPTCHA_SELECTOR = 'form[name="captcha"]'
CLASS_LABEL_SELECTOR = ".classe-nice"
TOTAL_SELECTOR = ".resultado-busca"
ROW_SELECTOR = ".tabela-processo tr"

MIN_COLUMNS = 4

_INTEGER = re.compile(r"\d+")


def load(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _soup(doc: BeautifulSoup | str) -> BeautifulSoup:
    return doc if isinstance(doc, BeautifulSoup) else load(doc)


def _text(tag) -> str:
    return " ".join(tag.get_text(" ").split())


def has_captcha(doc: BeautifulSoup | str) -> bool:
    return _soup(doc).select_one(CAPTCHA_SELECTOR) is not None


def parse_rows(doc: BeautifulSoup | str) -> list[CandidateMark]:
    """
    Extract candidate marks from the results table, in page order.
    Rows with fewer than four cells are scraping noise and are skipped.
    """
    candidates: list[CandidateMark] = []
    for row in _soup(doc).select(ROW_SELECTOR)[1:]:
        cells = [_text(td) for td in row.find_all("td")]
        if len(cells) < MIN_COLUMNS:
            continue
        mark_type = cells[4] if len(cells) > 4 else ""
        candidates.append(CandidateMark(
            registry_id=cells[0],
            name=cells[1],
            status=cells[2],
            owner=cells[3],
            mark_type=mark_type or DEFAULT_MARK_TYPE,
        ))
    return candidates


def parse_class_label(doc: BeautifulSoup | str) -> str | None:
    element = _soup(doc).select_one(CLASS_LABEL_SELECTOR)
    if element is None:
        return None
    return _text(element) or None


def parse_total_count(doc: BeautifulSoup | str) -> int:
    element = _soup(doc).select_one(TOTAL_SELECTOR)
    if element is None:
        return 0
    match = _INTEGER.search(element.get_text())
    return int(match.group()) if match else 0


def parse_search_page(doc: BeautifulSoup | str, query: SearchQuery) -> SearchResult:
    soup = _soup(doc)
    return SearchResult(
        query_name=query.name,
        candidates=tuple(parse_rows(soup)),
        total_count=parse_total_count(soup),
        class_label=parse_class_label(soup),
        class_code=query.class_code,
    )
