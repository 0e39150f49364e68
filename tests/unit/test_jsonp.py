"""
Testes unitários para o desembrulhador JSONP/JSON.
"""

import pytest

from alimonitor.core.exceptions import ParseError
from alimonitor.pipeline.jsonp import has_result, unwrap


class TestUnwrap:
    """Testes para unwrap."""

    def test_jsonp(self):
        assert unwrap('cb123({"a":1})') == {"a": 1}

    def test_json_puro(self):
        assert unwrap('{"a":1}') == {"a": 1}

    def test_jsonp_com_ponto_e_virgula_e_espacos(self):
        assert unwrap('  mtopjsonp3( {"a": [1, 2]} );\n') == {"a": [1, 2]}

    def test_parenteses_dentro_de_string(self):
        """O envelope é removido sem cortar o conteúdo."""
        assert unwrap('cb({"t": "Fone (preto)"})') == {"t": "Fone (preto)"}

    def test_lista_json(self):
        assert unwrap("[1, 2, 3]") == [1, 2, 3]

    def test_texto_invalido(self):
        with pytest.raises(ParseError):
            unwrap("not json")

    def test_lixo_apos_envelope(self):
        """Casamento ancorado: conteúdo depois do envelope invalida o texto."""
        with pytest.raises(ParseError):
            unwrap('cb({"a":1}) trailing')

    def test_corpo_vazio(self):
        with pytest.raises(ParseError):
            unwrap("")

    def test_erro_guarda_trecho_do_corpo(self):
        """ParseError registra o corpo truncado nos detalhes."""
        with pytest.raises(ParseError) as exc_info:
            unwrap("x" * 500)

        assert exc_info.value.details["field"] == "body"
        assert len(exc_info.value.details["raw_data"]) == 200


class TestHasResult:
    """Testes para has_result."""

    def test_com_data_result(self):
        assert has_result({"data": {"result": {"PRICE": {}}}}) is True

    def test_sem_result(self):
        assert has_result({"data": {"priceModule": {}}}) is False

    def test_nao_mapeamento(self):
        assert has_result([1, 2]) is False
