"""Unit tests for helpers.utils"""
import os
import threading
import time
from unittest import TestCase
import pytest
from es_setup.exceptions import ConfigurationError, FailedExecution
from es_setup.helpers.utils import (
    ensure_scheme, fan_out, load_artifact, replace_parameters, report_failure)
from . import ArtifactTestCase, testvars

class TestReportFailure(TestCase):
    def test_raises_failed_execution(self):
        with pytest.raises(FailedExecution, match=r'Simulated Failure'):
            report_failure(testvars.fake_fail)

class TestReplaceParameters(TestCase):
    def test_replaces_known(self):
        self.assertEqual('{"shards": 3}', replace_parameters('{"shards": ${SHARDS}}', {'SHARDS': 3}))
    def test_keeps_unknown(self):
        text = '{"a": "${A}", "b": "${B}"}'
        self.assertEqual('{"a": "one", "b": "${B}"}', replace_parameters(text, {'A': 'one'}))
    def test_no_parameters(self):
        self.assertEqual('${A}', replace_parameters('${A}', None))
    def test_every_occurrence(self):
        self.assertEqual('x-x', replace_parameters('${A}-${A}', {'A': 'x'}))

class TestLoadArtifact(ArtifactTestCase):
    def test_json_relative_to_base_dir(self):
        self.write_json('pipeline.json', testvars.pipeline_body)
        body = load_artifact('pipeline.json', parameters={'ENV': 'prod'}, base_dir=self.base_dir)
        self.assertEqual('prod', body['processors'][0]['set']['value'])
    def test_unmatched_parameter_is_kept(self):
        self.write_json('pipeline.json', testvars.pipeline_body)
        body = load_artifact('pipeline.json', base_dir=self.base_dir)
        self.assertEqual('${ENV}', body['processors'][0]['set']['value'])
    def test_yaml(self):
        self.write_text('index.yml', 'settings:\n  number_of_shards: ${SHARDS}\n')
        body = load_artifact('index.yml', parameters={'SHARDS': 2}, base_dir=self.base_dir)
        self.assertEqual({'settings': {'number_of_shards': 2}}, body)
    def test_absolute_path(self):
        self.write_json('index.json', testvars.index_body)
        path = os.path.join(self.base_dir, 'index.json')
        self.assertEqual(testvars.index_body, load_artifact(path, base_dir='/nonexistent'))
    def test_missing_file(self):
        with pytest.raises(ConfigurationError, match=r'Unable to read artifact'):
            load_artifact('missing.json', base_dir=self.base_dir)
    def test_bad_json(self):
        self.write_text('bad.json', '{"not": json')
        with pytest.raises(ConfigurationError, match=r'Unable to parse artifact'):
            load_artifact('bad.json', base_dir=self.base_dir)

class TestEnsureScheme(TestCase):
    def test_adds_https(self):
        self.assertEqual('https://search.example.com', ensure_scheme('search.example.com'))
    def test_keeps_http(self):
        self.assertEqual('http://localhost:9200', ensure_scheme('http://localhost:9200'))
    def test_keeps_https(self):
        self.assertEqual('https://host', ensure_scheme('https://host'))

class TestFanOut(TestCase):
    def test_empty(self):
        self.assertEqual([], fan_out(str, []))
    def test_keeps_input_order(self):
        self.assertEqual([2, 4, 6, 8], fan_out(lambda x: x * 2, [1, 2, 3, 4], max_workers=4))
    def test_runs_concurrently(self):
        barrier = threading.Barrier(3, timeout=5)
        def func(item):
            barrier.wait()
            return item
        self.assertEqual(['a', 'b', 'c'], fan_out(func, ['a', 'b', 'c'], max_workers=3))
    def test_first_exception_raised(self):
        def func(item):
            if item == 'bad':
                raise ConfigurationError('bad item')
            return item
        with pytest.raises(ConfigurationError, match=r'bad item'):
            fan_out(func, ['good', 'bad', 'good'], max_workers=1)
    def test_pending_items_cancelled(self):
        seen = []
        def func(item):
            seen.append(item)
            if item == 1:
                raise ConfigurationError('fail fast')
            time.sleep(0.2)
            return item
        with pytest.raises(ConfigurationError):
            fan_out(func, [1, 2, 3, 4, 5], max_workers=1)
        self.assertEqual(1, seen[0])
        self.assertNotIn(5, seen)
