import json
import os
import shutil
import tempfile
from unittest import TestCase
from unittest.mock import Mock


def fake_client(responses=None, errors=None):
    """
    A Mock standing in for :py:class:`~.es_setup.client.SearchClient`

    ``responses`` and ``errors`` are keyed by ``(method, path)``. Every request is
    recorded in ``client.requests`` in the order it was made.
    """
    responses = responses or {}
    errors = errors or {}
    client = Mock()
    client.requests = []

    def _make(method):
        def _call(path, body=None):
            client.requests.append((method, path, body))
            key = (method, path)
            if key in errors:
                error = errors[key]
                if isinstance(error, list):
                    error = error.pop(0) if len(error) > 1 else error[0]
                if error is not None:
                    raise error
            value = responses.get(key, {'acknowledged': True})
            if isinstance(value, list):
                return value.pop(0) if len(value) > 1 else value[0]
            return value
        return _call

    client.get.side_effect = _make('GET')
    client.put.side_effect = _make('PUT')
    client.post.side_effect = _make('POST')
    return client


class ArtifactTestCase(TestCase):
    """Writes artifact files to a scratch directory"""
    def setUp(self):
        super().setUp()
        self.base_dir = tempfile.mkdtemp(suffix='es_setup')

    def tearDown(self):
        shutil.rmtree(self.base_dir, ignore_errors=True)
        super().tearDown()

    def write_json(self, filename, data):
        with open(os.path.join(self.base_dir, filename), 'w', encoding='utf-8') as fhandle:
            json.dump(data, fhandle)
        return filename

    def write_text(self, filename, text):
        with open(os.path.join(self.base_dir, filename), 'w', encoding='utf-8') as fhandle:
            fhandle.write(text)
        return filename
