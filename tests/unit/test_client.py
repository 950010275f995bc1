"""Unit tests for the search client"""
import json
from unittest import TestCase
from unittest.mock import Mock, patch
import pytest
from elastic_transport import ApiResponseMeta, HttpHeaders, NodeConfig, TransportApiResponse
from elasticsearch8.exceptions import ConnectionError
from es_setup.client import JSON_HEADERS, SearchClient, build_client, error_type
from es_setup.exceptions import ClientException, RateLimited, ResourceNotFound, SearchServerError

BASE_URL = 'https://search.example.com'
ERROR_BODY = {'error': {'type': 'illegal_argument_exception', 'reason': 'bad'}, 'status': 400}

def response(status, body):
    return Mock(meta=Mock(status=status), body=body)

def transport_response(status, body, headers=None):
    meta = ApiResponseMeta(
        status=status, http_version='1.1', headers=HttpHeaders(headers or {}),
        duration=0.0, node=NodeConfig('https', 'search.example.com', 443))
    return TransportApiResponse(meta, body)

class TestErrorType(TestCase):
    def test_found(self):
        self.assertEqual('illegal_argument_exception', error_type(ERROR_BODY))
    def test_string_body(self):
        self.assertIsNone(error_type('Not Found'))
    def test_no_body(self):
        self.assertIsNone(error_type(None))

class TestSearchClient(TestCase):
    def setUp(self):
        self.es = Mock()
        self.transport = self.es.transport
        self.transport.perform_request.return_value = response(200, {'acknowledged': True})
        self.client = SearchClient(self.es, BASE_URL + '/')
    def test_strips_trailing_slash(self):
        self.assertEqual(BASE_URL, self.client.base_url)
    def test_get(self):
        self.assertEqual({'acknowledged': True}, self.client.get('/_alias/alias1'))
        self.transport.perform_request.assert_called_once_with(
            'GET', '/_alias/alias1',
            headers={'accept': 'application/json', 'content-type': 'application/json'},
            body=None)
        self.es.perform_request.assert_not_called()
    def test_put_serializes_body(self):
        self.client.put('/_template/t1', {'mappings': {}})
        args, kwargs = self.transport.perform_request.call_args
        self.assertEqual(('PUT', '/_template/t1'), args)
        self.assertEqual({'mappings': {}}, json.loads(kwargs['body']))
    def test_post_keeps_query_string(self):
        self.client.post('/_reindex?wait_for_completion=false', {'source': {'index': 'a'}})
        args, _ = self.transport.perform_request.call_args
        self.assertEqual(('POST', '/_reindex?wait_for_completion=false'), args)
    def test_adds_leading_slash(self):
        self.client.get('_tasks')
        args, _ = self.transport.perform_request.call_args
        self.assertEqual('/_tasks', args[1])
    def test_any_2xx(self):
        self.transport.perform_request.return_value = response(201, {'created': True})
        self.assertEqual({'created': True}, self.client.put('/index1', {}))
    def test_string_body_decoded(self):
        self.transport.perform_request.return_value = response(200, '{"task": "node1:1"}')
        self.assertEqual({'task': 'node1:1'}, self.client.post('/_reindex'))
    def test_bytes_body_decoded(self):
        self.transport.perform_request.return_value = response(200, b'{"task": "node1:1"}')
        self.assertEqual({'task': 'node1:1'}, self.client.post('/_reindex'))
    def test_non_json_text_returned(self):
        self.transport.perform_request.return_value = response(200, 'OK')
        self.assertEqual('OK', self.client.get('/'))
    def test_get_404(self):
        self.transport.perform_request.return_value = response(404, {'error': {'type': 'x'}})
        with pytest.raises(ResourceNotFound) as err:
            self.client.get('/_template/missing')
        self.assertEqual(404, err.value.status_code)
        self.assertEqual('x', err.value.error_type)
    def test_put_404_is_server_error(self):
        self.transport.perform_request.return_value = response(404, 'no handler')
        with pytest.raises(SearchServerError) as err:
            self.client.put('/_snapshot/repo', {})
        self.assertNotIsInstance(err.value, ResourceNotFound)
    def test_429(self):
        self.transport.perform_request.return_value = response(429, 'Too Many Requests')
        with pytest.raises(RateLimited):
            self.client.get('/_tasks')
    def test_other_status(self):
        self.transport.perform_request.return_value = response(400, ERROR_BODY)
        with pytest.raises(SearchServerError, match=r'HTTP 400') as err:
            self.client.put('/index1', {})
        self.assertEqual(400, err.value.status_code)
        self.assertEqual(ERROR_BODY, err.value.server_message)
        self.assertEqual('illegal_argument_exception', err.value.error_type)
    def test_transport_error(self):
        self.transport.perform_request.side_effect = ConnectionError('Connection refused')
        with pytest.raises(ClientException, match=r'GET /_tasks failed'):
            self.client.get('/_tasks')
    def test_signer_headers_sent(self):
        signer = Mock()
        signer.sign.return_value = {'authorization': 'AWS4-HMAC-SHA256 ...'}
        client = SearchClient(self.es, BASE_URL, signer=signer)
        client.put('/index1', {'a': 1})
        signer.sign.assert_called_once_with(
            'PUT', BASE_URL + '/index1',
            {'accept': 'application/json', 'content-type': 'application/json'},
            b'{"a": 1}')
        _, kwargs = self.transport.perform_request.call_args
        self.assertEqual({'authorization': 'AWS4-HMAC-SHA256 ...'}, kwargs['headers'])

class TestWithoutProductHeader(TestCase):
    """Clusters that don't send X-Elastic-Product, e.g. AWS-managed domains"""
    def setUp(self):
        self.es = build_client(BASE_URL)
        self.client = SearchClient(self.es, BASE_URL)
    def test_200_parsed(self):
        body = {'index1': {'aliases': {'alias1': {}}}}
        with patch.object(
                self.es.transport, 'perform_request',
                return_value=transport_response(200, body)) as mock_request:
            self.assertEqual(body, self.client.get('/_alias/alias1'))
        _, kwargs = mock_request.call_args
        self.assertEqual(JSON_HEADERS, kwargs['headers'])
    def test_404_still_mapped(self):
        with patch.object(
                self.es.transport, 'perform_request',
                return_value=transport_response(404, {'error': 'alias [a] missing'})):
            with pytest.raises(ResourceNotFound):
                self.client.get('/_alias/a')

class TestBuildClient(TestCase):
    @patch('es_setup.client.Elasticsearch')
    def test_kwargs(self, mock_es):
        build_client(BASE_URL, request_timeout=60, ca_certs='/tmp/ca.pem')
        mock_es.assert_called_once_with(
            hosts=[BASE_URL], request_timeout=60, verify_certs=True, retry_on_status=(),
            ca_certs='/tmp/ca.pem')
    @patch('es_setup.client.Elasticsearch')
    def test_no_status_retries(self, mock_es):
        build_client(BASE_URL)
        _, kwargs = mock_es.call_args
        self.assertEqual((), kwargs['retry_on_status'])
    @patch('es_setup.client.Elasticsearch')
    def test_failure(self, mock_es):
        mock_es.side_effect = ValueError('bad url')
        with pytest.raises(ClientException, match=r'Unable to build a client'):
            build_client('not a url')
