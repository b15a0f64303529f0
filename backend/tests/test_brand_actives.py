"""
Brand derivation from official CIMA names and active-ingredient extraction /
spelling normalization.
"""

import pytest

from medlookup.core.actives import format_actives, get_actives, normalize_active_name
from medlookup.core.brand import derive_brand, format_brand_from_selection, title_case_word


# ════════════════════════════════════════════
# BRAND
# ════════════════════════════════════════════

class TestDeriveBrand:

    @pytest.mark.parametrize("nombre,expected", [
        ("IBUPROFENO 600 MG COMPRIMIDOS RECUBIERTOS EFG", "Ibuprofeno"),
        ("PARACETAMOL", "Paracetamol"),
        ("ADIRO 100 MG COMPRIMIDOS GASTRORRESISTENTES EFG", "Adiro"),
        ("FRENADOL COMPLEX", "Frenadol Complex"),
        ("VENTOLIN INHALADOR", "Ventolin"),
        ("NOLOTIL CÁPSULAS", "Nolotil"),
        ("DALSY 20 mg/ml SUSPENSION ORAL", "Dalsy"),
        ("AMOXICILINA/ACIDO CLAVULANICO NORMON 875/125 MG", "Amoxicilina/acido Clavulanico Normon"),
        ("PULMICORT TURBUHALER 200", "Pulmicort"),
        ("VOLTAREN EMULGEL 1% GEL", "Voltaren Emulgel"),
        ("FOO µg BAR", "Foo"),
        ("DUROGESIC MATRIX 25 MICROGRAMOS/H", "Durogesic Matrix"),
        ("ENANTYUM 25 mg comprimidos", "Enantyum"),
    ])
    def test_stops_at_dose_unit_or_form(self, nombre, expected):
        assert derive_brand({"nombre": nombre}) == expected

    @pytest.mark.parametrize("nombre,expected", [
        ("500 MG COMPRIMIDOS", "500"),
        ("EFG", "Efg"),
        ("G", "G"),
        ("1234", "1234"),
    ])
    def test_first_token_fallback(self, nombre, expected):
        assert derive_brand({"nombre": nombre}) == expected

    def test_whitespace_is_normalized(self):
        assert derive_brand({"nombre": "  ASPIRINA   PLUS\tC  "}) == "Aspirina Plus C"

    @pytest.mark.parametrize("med", [None, {}, {"nombre": ""}, {"nombre": "   "}, {"nombre": None}])
    def test_missing_name(self, med):
        assert derive_brand(med) == ""


class TestSelectionBrand:

    def test_title_case_each_word(self):
        assert format_brand_from_selection("  aDIRO  plus ") == "Adiro Plus"

    def test_empty(self):
        assert format_brand_from_selection("") == ""
        assert format_brand_from_selection(None) == ""

    def test_title_case_word(self):
        assert title_case_word("ÁCIDO") == "Ácido"
        assert title_case_word("") == ""


# ════════════════════════════════════════════
# ACTIVE INGREDIENTS
# ════════════════════════════════════════════

class TestGetActives:

    def test_structured_list_with_name_preference(self):
        med = {"principiosActivos": [
            {"nombre": "PARACETAMOL", "principioActivo": "ignored"},
            {"principioActivo": "CAFEINA"},
            {"principio": "CODEINA FOSFATO"},
            {"codigo": "1234"},
        ]}
        assert get_actives(med) == ["PARACETAMOL", "CAFEINA", "CODEINA FOSFATO"]

    def test_plain_string_entries(self):
        assert get_actives({"principiosActivos": ["IBUPROFENO", " "]}) == ["IBUPROFENO"]

    def test_list_without_names_falls_back_to_pactivos(self):
        med = {"principiosActivos": [{"codigo": "1"}], "pactivos": " ACIDO ACETILSALICILICO "}
        assert get_actives(med) == ["ACIDO ACETILSALICILICO"]

    def test_structured_list_wins_over_pactivos(self):
        med = {"principiosActivos": [{"nombre": "A"}], "pactivos": "B"}
        assert get_actives(med) == ["A"]

    def test_pactivos_object(self):
        assert get_actives({"pactivos": {"nombre": " OMEPRAZOL "}}) == ["OMEPRAZOL"]

    @pytest.mark.parametrize("med", [None, {}, {"principiosActivos": []}, {"pactivos": "  "}, {"pactivos": {}}])
    def test_nothing_found(self, med):
        assert get_actives(med) == []


class TestNormalizeActiveName:

    @pytest.mark.parametrize("raw,expected", [
        ("acido acetilsalicilico", "ácido acetilsalicílico"),
        ("ACIDO  ACETILSALICILICO", "ácido acetilsalicílico"),
        ("valproico acido", "ácido valproico"),
        ("  Ibuprofeno   sodico ", "ibuprofeno sódico"),
        ("DICLOFENACO POTASICO", "diclofenaco potásico"),
        ("hidroxido de aluminio", "hidróxido de aluminio"),
        ("tramadol, clorhidrico", "tramadol, clorhídrico"),
        ("acido clavulanico", "ácido clavulanico"),   # not in the table: left as is
        ("metformina hidrocloruro", "metformina hidrocloruro"),
    ])
    def test_corrections(self, raw, expected):
        assert normalize_active_name(raw) == expected

    @pytest.mark.parametrize("raw", [
        "acido acetilsalicilico", "valproico acido", "ibuprofeno sodico", "hidroxido de magnesio",
    ])
    def test_idempotent(self, raw):
        once = normalize_active_name(raw)
        assert normalize_active_name(once) == once

    def test_whole_words_only(self):
        assert normalize_active_name("acidosis") == "acidosis"

    def test_empty_passthrough(self):
        assert normalize_active_name("") == ""
        assert normalize_active_name(None) is None

    def test_format_keeps_order(self):
        assert format_actives(["PARACETAMOL", "ACIDO ASCORBICO"]) == "paracetamol, ácido ascorbico"
        assert format_actives([]) == ""
