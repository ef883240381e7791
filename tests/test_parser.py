# tests/test_parser.py
"""Tests for parsing registry result pages into candidate records."""

from fakes import CAPTCHA_PAGE, EMPTY_PAGE, RESULTS_PAGE
from models import SearchQuery
from registry import parser


def test_parse_rows_skips_header_and_short_rows() -> None:
    candidates = parser.parse_rows(RESULTS_PAGE)

    assert len(candidates) == 2
    first, second = candidates
    assert first.registry_id == "912345678"
    assert first.name == "SOLARIS"
    assert first.status == "Registro vigente"
    assert first.owner == "Solaris Ltda"
    assert first.mark_type == "Nominativa"

    assert second.name == "SOLAR MODA"
    assert second.status == "Arquivado"
    assert second.mark_type == "unspecified"


def test_header_row_is_skipped_even_when_it_uses_td_cells() -> None:
    html = """
    <table class="tabela-processo">
      <tr><td>Número</td><td>Marca</td><td>Situação</td><td>Titular</td></tr>
      <tr><td>1</td><td>ALPHA</td><td>Registro vigente</td><td>A</td></tr>
    </table>
    """
    candidates = parser.parse_rows(html)
    assert [c.name for c in candidates] == ["ALPHA"]


def test_blank_mark_type_defaults_to_unspecified() -> None:
    html = """
    <table class="tabela-processo">
      <tr><th>h</th></tr>
      <tr><td>1</td><td>ALPHA</td><td>Arquivado</td><td>A</td><td>  </td></tr>
    </table>
    """
    assert parser.parse_rows(html)[0].mark_type == "unspecified"


def test_parse_search_page() -> None:
    query = SearchQuery.create("Solaris", class_code="25")
    result = parser.parse_search_page(RESULTS_PAGE, query)

    assert result.query_name == "Solaris"
    assert len(result.candidates) == 2
    assert result.total_count == 3
    assert result.class_label == "NCL(12) 25 - Vestuário"
    assert result.class_code == "25"


def test_page_without_results() -> None:
    result = parser.parse_search_page(EMPTY_PAGE, SearchQuery.create("Nada"))

    assert result.candidates == ()
    assert result.total_count == 0
    assert result.class_label is None
    assert result.class_code is None


def test_page_without_table_or_summary() -> None:
    result = parser.parse_search_page("<html><body><p>Sem dados</p></body></html>", SearchQuery.create("x"))
    assert result.candidates == ()
    assert result.total_count == 0


def test_captcha_detection() -> None:
    assert parser.has_captcha(CAPTCHA_PAGE)
    assert not parser.has_captcha(RESULTS_PAGE)
