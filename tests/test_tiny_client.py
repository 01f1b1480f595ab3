from unittest.mock import patch
from urllib.parse import parse_qs

import pytest
import requests
import responses as responses_lib

from tinysync.config import TinySyncConfig
from tinysync.exceptions import (
    AuthenticationError,
    ConfigurationError,
    RateLimitExceeded,
    RemoteError,
    RemoteUnavailable,
)
from tinysync.tiny_client import CallBudget, TinyClient

BASE_URL = 'https://api.fake-tiny.com.br/api2'
TOKEN = '0123456789abcdef' * 4
INFO_URL = f'{BASE_URL}/info.php'
PRODUCTS_URL = f'{BASE_URL}/produtos.pesquisa.php'


def make_client(token=TOKEN, max_calls=3):
    return TinyClient(TinySyncConfig(api_token=token, base_url=BASE_URL, max_calls=max_calls))


# ---------------------------------------------------------------------------
# Call budget
# ---------------------------------------------------------------------------

class TestCallBudget:
    def test_counts_each_acquire(self):
        budget = CallBudget(3)
        budget.acquire()
        budget.acquire()
        assert budget.used == 2

    def test_refuses_once_exhausted(self):
        budget = CallBudget(3)
        for _ in range(3):
            budget.acquire()
        with pytest.raises(RateLimitExceeded, match='call budget exhausted'):
            budget.acquire()
        assert budget.used == 3

    @responses_lib.activate
    def test_fourth_call_fails_before_any_request(self):
        for _ in range(3):
            responses_lib.add(responses_lib.POST, INFO_URL, json={'retorno': {'status': 'OK'}})
        client = make_client()

        for _ in range(3):
            client.account_info()
        with pytest.raises(RateLimitExceeded, match=r'MAX_CALLS limit reached \(3\)'):
            client.account_info()

        assert len(responses_lib.calls) == 3
        assert client.calls_used == 3

    def test_every_client_starts_with_a_fresh_budget(self):
        assert make_client().calls_used == 0


# ---------------------------------------------------------------------------
# Token gate
# ---------------------------------------------------------------------------

class TestTokenGate:
    @responses_lib.activate
    def test_missing_token_rejected(self):
        with pytest.raises(ConfigurationError, match='not configured'):
            make_client(token=None)
        assert len(responses_lib.calls) == 0

    @responses_lib.activate
    @pytest.mark.parametrize('token', ['abc', 'g' * 64, '0123456789ABCDEF' * 4, 'a' * 65])
    def test_malformed_token_rejected_without_network(self, token):
        with pytest.raises(ConfigurationError, match='invalid format'):
            make_client(token=token)
        assert len(responses_lib.calls) == 0


# ---------------------------------------------------------------------------
# Request shape
# ---------------------------------------------------------------------------

class TestRequest:
    @responses_lib.activate
    def test_posts_token_and_json_format(self):
        responses_lib.add(responses_lib.POST, PRODUCTS_URL, json={'retorno': {'status': 'OK', 'produtos': []}})
        make_client().search('produtos.pesquisa.php', pagina=1)

        body = parse_qs(responses_lib.calls[0].request.body)
        assert body['token'] == [TOKEN]
        assert body['formato'] == ['JSON']
        assert body['pagina'] == ['1']

    @responses_lib.activate
    def test_none_params_are_not_sent(self):
        responses_lib.add(responses_lib.POST, PRODUCTS_URL, json={'retorno': {'status': 'OK'}})
        make_client().search('produtos.pesquisa.php', pesquisa=None)

        body = parse_qs(responses_lib.calls[0].request.body)
        assert 'pesquisa' not in body

    @responses_lib.activate
    def test_returns_retorno_on_success(self):
        responses_lib.add(
            responses_lib.POST, INFO_URL,
            json={'retorno': {'status': 'OK', 'nome_empresa': 'Atelier Ltda'}},
        )
        retorno = make_client().account_info()
        assert retorno['nome_empresa'] == 'Atelier Ltda'


# ---------------------------------------------------------------------------
# Response classification
# ---------------------------------------------------------------------------

class TestClassification:
    @responses_lib.activate
    def test_http_error_is_remote_unavailable(self):
        responses_lib.add(responses_lib.POST, INFO_URL, status=503)
        with pytest.raises(RemoteUnavailable, match='HTTP 503') as exc_info:
            make_client().account_info()
        assert exc_info.value.status_code == 503

    @responses_lib.activate
    def test_redirect_is_remote_unavailable(self):
        responses_lib.add(responses_lib.POST, INFO_URL, status=302, json={'retorno': {'status': 'OK'}})
        with pytest.raises(RemoteUnavailable, match='HTTP 302') as exc_info:
            make_client().account_info()
        assert exc_info.value.status_code == 302

    def test_connection_error_is_remote_unavailable(self):
        client = make_client()
        with patch.object(client._session, 'post', side_effect=requests.ConnectionError('refused')):
            with pytest.raises(RemoteUnavailable, match='refused'):
                client.account_info()
        assert client.calls_used == 1

    @responses_lib.activate
    def test_xml_envelope_extracts_only_erro_text(self):
        xml = (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<retorno><status>Erro</status><erros><erro>Token invalido</erro></erros></retorno>'
        )
        responses_lib.add(responses_lib.POST, INFO_URL, body=xml, status=200)
        with pytest.raises(RemoteError) as exc_info:
            make_client().account_info()
        assert str(exc_info.value) == 'Tiny API error: Token invalido'

    @responses_lib.activate
    def test_xml_erro_tag_with_attributes(self):
        xml = '<?xml version="1.0"?><retorno><erros><erro codigo="2">Token expirado</erro></erros></retorno>'
        responses_lib.add(responses_lib.POST, INFO_URL, body=xml, status=200)
        with pytest.raises(RemoteError) as exc_info:
            make_client().account_info()
        assert str(exc_info.value) == 'Tiny API error: Token expirado'

    @responses_lib.activate
    def test_xml_envelope_without_erro_tag_uses_fallback(self):
        responses_lib.add(responses_lib.POST, INFO_URL, body='  <?xml version="1.0"?><retorno/>', status=200)
        with pytest.raises(RemoteError, match='XML error'):
            make_client().account_info()

    @responses_lib.activate
    def test_non_json_body(self):
        responses_lib.add(responses_lib.POST, INFO_URL, body='<html>oops</html>', status=200)
        with pytest.raises(RemoteError, match='Invalid response'):
            make_client().account_info()

    @responses_lib.activate
    def test_missing_retorno(self):
        responses_lib.add(responses_lib.POST, INFO_URL, json={'foo': 'bar'})
        with pytest.raises(RemoteError, match='retorno'):
            make_client().account_info()

    @responses_lib.activate
    def test_embedded_error_status(self):
        responses_lib.add(
            responses_lib.POST, PRODUCTS_URL,
            json={'retorno': {'status': 'Erro', 'erros': [{'erro': 'A consulta nao retornou registros'}]}},
        )
        with pytest.raises(RemoteError, match='nao retornou registros') as exc_info:
            make_client().search('produtos.pesquisa.php')
        assert not isinstance(exc_info.value, AuthenticationError)

    @responses_lib.activate
    def test_embedded_error_code_without_message(self):
        responses_lib.add(
            responses_lib.POST, PRODUCTS_URL,
            json={'retorno': {'status': 'OK', 'codigo_erro': '6'}},
        )
        with pytest.raises(RemoteError, match='Unknown error'):
            make_client().search('produtos.pesquisa.php')

    @responses_lib.activate
    def test_token_error_is_authentication_error(self):
        responses_lib.add(
            responses_lib.POST, INFO_URL,
            json={'retorno': {'status': 'Erro', 'codigo_erro': '2', 'erros': [{'erro': 'Token invalido'}]}},
        )
        with pytest.raises(AuthenticationError, match='Reconfigure TINY_API_TOKEN'):
            make_client().account_info()

    @responses_lib.activate
    def test_failed_call_still_counts_against_budget(self):
        responses_lib.add(responses_lib.POST, INFO_URL, status=500)
        client = make_client()
        with pytest.raises(RemoteUnavailable):
            client.account_info()
        assert client.calls_used == 1
