"""A thin GET/PUT/POST client for the search cluster

Everything es-setup sends to the cluster goes through :py:class:`SearchClient`, which
adds the JSON content type and any signing headers, and turns HTTP errors into
:py:mod:`es_setup.exceptions` classes the rest of the code can act on.
"""

import json
import logging
from elasticsearch8 import Elasticsearch
from elasticsearch8.exceptions import TransportError
from es_setup.exceptions import (
    ClientException,
    RateLimited,
    ResourceNotFound,
    SearchServerError,
)

logger = logging.getLogger(__name__)

JSON_HEADERS = {'accept': 'application/json', 'content-type': 'application/json'}


def build_client(base_url, request_timeout=30, verify_certs=True, ca_certs=None):
    """
    Build an :py:class:`~.elasticsearch8.Elasticsearch` client for ``base_url``. No
    connection test is made, as requests may need to be signed first and a test
    request would go out unsigned.

    :param base_url: The cluster URL
    :param request_timeout: Seconds before a request times out
    :param verify_certs: Whether to verify TLS certificates
    :param ca_certs: Path to a CA bundle

    :type base_url: str
    :type request_timeout: int
    :type verify_certs: bool
    :type ca_certs: str

    :rtype: :py:class:`~.elasticsearch8.Elasticsearch`
    """
    client_kwargs = {
        'hosts': [base_url],
        'request_timeout': request_timeout,
        'verify_certs': verify_certs,
        # 429s are backed off by the task waiter, not retried by the transport
        'retry_on_status': (),
    }
    if ca_certs:
        logger.debug('Using CA certificate: %s', ca_certs)
        client_kwargs['ca_certs'] = ca_certs
    try:
        return Elasticsearch(**client_kwargs)
    except (ValueError, TypeError) as err:
        raise ClientException(f'Unable to build a client for {base_url}: {err}') from err


def error_type(body):
    """
    :param body: An error response body

    :returns: ``body['error']['type']`` if it is there, otherwise ``None``
    :rtype: str
    """
    try:
        return body['error']['type']
    except (KeyError, TypeError):
        return None


class SearchClient:
    """GET/PUT/POST against one cluster"""

    def __init__(self, client, base_url, signer=None):
        """
        :param client: A client connection object
        :param base_url: The cluster URL the client points at. Used for signing.
        :param signer: Optional object with a ``sign(method, url, headers, body)``
            method returning the headers to send, e.g.
            :py:class:`~.es_setup.helpers.aws.AwsSigner`

        :type client: :py:class:`~.elasticsearch.Elasticsearch`
        :type base_url: str
        """
        #: The :py:class:`~.elasticsearch.Elasticsearch` client object
        self.client = client
        #: The cluster URL, without a trailing slash
        self.base_url = base_url.rstrip('/')
        #: The request signer, or ``None`` to send requests unsigned
        self.signer = signer

    def get(self, path):
        """
        :param path: Request path, e.g. ``/_alias/my_alias``

        :returns: The parsed response body
        :raises: :py:exc:`~.es_setup.exceptions.ResourceNotFound` on 404
        """
        return self.request('GET', path, not_found=True)

    def put(self, path, body=None):
        """
        :param path: Request path, e.g. ``/_template/my_template``
        :param body: A JSON-serializable request body

        :returns: The parsed response body
        """
        return self.request('PUT', path, body=body)

    def post(self, path, body=None):
        """
        :param path: Request path, which may carry a query string
        :param body: A JSON-serializable request body

        :returns: The parsed response body
        """
        return self.request('POST', path, body=body)

    def request(self, method, path, body=None, not_found=False):
        """
        Send one request.

        :param method: HTTP method
        :param path: Request path, which may carry a query string
        :param body: A JSON-serializable request body
        :param not_found: Raise :py:exc:`~.es_setup.exceptions.ResourceNotFound`
            rather than :py:exc:`~.es_setup.exceptions.SearchServerError` on 404

        :type method: str
        :type path: str
        :type not_found: bool

        :returns: The parsed response body
        """
        if not path.startswith('/'):
            path = f'/{path}'
        payload = None if body is None else json.dumps(body).encode('utf-8')
        headers = dict(JSON_HEADERS)
        if self.signer is not None:
            headers = self.signer.sign(method, f'{self.base_url}{path}', headers, payload)
        logger.debug('%s %s', method, path)
        # Straight to the transport: no product check, no compatibility mimetypes
        try:
            response = self.client.transport.perform_request(
                method, path, headers=headers, body=payload
            )
        except TransportError as err:
            raise ClientException(f'{method} {path} failed: {err}') from err
        status = response.meta.status
        body = self._parse(response.body)
        if 200 <= status < 300:
            return body
        logger.debug('%s %s returned HTTP %s', method, path, status)
        if status == 404 and not_found:
            raise ResourceNotFound(status, body, error_type(body))
        if status == 429:
            raise RateLimited(status, body, error_type(body))
        raise SearchServerError(status, body, error_type(body))

    @staticmethod
    def _parse(body):
        if isinstance(body, (bytes, str)):
            if isinstance(body, bytes):
                body = body.decode('utf-8')
            try:
                return json.loads(body)
            except ValueError:
                return body
        return body
