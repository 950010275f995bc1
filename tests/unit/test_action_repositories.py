"""Unit tests for the snapshot repository setup action"""
import copy
from unittest import TestCase
from unittest.mock import Mock
import pytest
from es_setup.actions import SetupRepositories
from es_setup.exceptions import ConfigurationError, SearchServerError
from . import fake_client, testvars

S3_REPO = {
    'name': 'backups',
    'type': 's3',
    'settings': {'bucket': 'my-bucket', 'region': 'us-east-1', 'role_name': 'snapshot-role'},
}

def sts_client():
    sts = Mock()
    sts.get_caller_identity.return_value = testvars.caller_identity
    return sts

class TestActionSetupRepositories(TestCase):
    def test_init_no_type(self):
        with pytest.raises(ConfigurationError, match=r'^Repo "backups" does not have a type\.$'):
            SetupRepositories(fake_client(), [{'name': 'backups'}])
    def test_fs_repository(self):
        client = fake_client()
        repo = {'name': 'local', 'type': 'fs', 'settings': {'location': '/mnt/backups'}}
        SetupRepositories(client, [repo]).do_action()
        self.assertEqual(
            [('PUT', '/_snapshot/local', {'type': 'fs', 'settings': {'location': '/mnt/backups'}})],
            client.requests)
    def test_no_settings(self):
        client = fake_client()
        SetupRepositories(client, [{'name': 'url', 'type': 'url'}]).do_action()
        self.assertEqual({'type': 'url', 'settings': {}}, client.requests[0][2])
    def test_s3_role_name_to_role_arn(self):
        client = fake_client()
        sts = sts_client()
        SetupRepositories(client, [S3_REPO], sts_client=sts).do_action()
        settings = client.requests[0][2]['settings']
        self.assertEqual('arn:aws:iam::123456789012:role/snapshot-role', settings['role_arn'])
        self.assertNotIn('role_name', settings)
        self.assertEqual('my-bucket', settings['bucket'])
        sts.get_caller_identity.assert_called_once_with()
    def test_s3_not_mutated(self):
        repo = copy.deepcopy(S3_REPO)
        SetupRepositories(fake_client(), [repo], sts_client=sts_client()).do_action()
        self.assertEqual(S3_REPO, repo)
    def test_s3_china_partition(self):
        client = fake_client()
        repo = copy.deepcopy(S3_REPO)
        repo['settings']['region'] = 'cn-north-1'
        SetupRepositories(client, [repo], sts_client=sts_client()).do_action()
        self.assertTrue(client.requests[0][2]['settings']['role_arn'].startswith('arn:aws-cn:'))
    def test_s3_with_role_arn(self):
        client = fake_client()
        sts = sts_client()
        repo = {'name': 'b', 'type': 's3', 'settings': {'role_arn': 'arn:aws:iam::1:role/r'}}
        SetupRepositories(client, [repo], sts_client=sts).do_action()
        sts.get_caller_identity.assert_not_called()
        self.assertEqual({'role_arn': 'arn:aws:iam::1:role/r'}, client.requests[0][2]['settings'])
    def test_errors_raised(self):
        client = fake_client(errors={('PUT', '/_snapshot/local'): testvars.server_error})
        with pytest.raises(SearchServerError):
            SetupRepositories(client, [{'name': 'local', 'type': 'fs'}]).do_action()
    def test_do_dry_run(self):
        client = fake_client()
        sts = sts_client()
        SetupRepositories(client, [S3_REPO], sts_client=sts).do_dry_run()
        self.assertEqual([], client.requests)
        sts.get_caller_identity.assert_not_called()
