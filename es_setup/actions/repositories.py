"""Snapshot repository setup action"""
import logging
from es_setup.helpers.aws import get_account_id, role_arn
from es_setup.helpers.testers import validate_repository, verify_client_object
from es_setup.helpers.utils import fan_out

logger = logging.getLogger(__name__)

class SetupRepositories:
    """Setup Snapshot Repositories Action Class"""
    def __init__(self, client, repositories=None, sts_client=None, max_workers=None):
        """
        :param client: A search client
        :param repositories: Repository descriptors, each with ``name``, ``type`` and
            ``settings``
        :param sts_client: A boto3 STS client. Only needed for ``s3`` repositories
            that name their role with ``role_name`` instead of ``role_arn``.
        :param max_workers: How many repositories to put at once

        :type client: :py:class:`~.es_setup.client.SearchClient`
        :type repositories: list
        :type max_workers: int
        """
        verify_client_object(client)
        self.client = client
        self.repositories = repositories or []
        for repository in self.repositories:
            validate_repository(repository)
        self.sts_client = sts_client
        self.max_workers = max_workers

    def resolve(self, repository):
        """
        :param repository: A repository descriptor

        :returns: The request body for ``repository``. For ``s3`` repositories with
            ``settings.role_name``, ``role_name`` is replaced by the derived
            ``role_arn``. ``repository`` itself is not changed.
        :rtype: dict
        """
        settings = dict(repository.get('settings') or {})
        if repository['type'] == 's3' and settings.get('role_name'):
            account_id = get_account_id(self.sts_client)
            settings['role_arn'] = role_arn(
                account_id, settings.pop('role_name'), settings.get('region')
            )
            logger.debug('Repository "%s" role_arn: %s', repository['name'], settings['role_arn'])
        return {'type': repository['type'], 'settings': settings}

    def put(self, repository):
        """PUT one repository"""
        logger.info('Putting snapshot repository "%s"', repository['name'])
        self.client.put(f"/_snapshot/{repository['name']}", self.resolve(repository))

    def do_dry_run(self):
        """Log what the output would be, but take no action."""
        logger.info('DRY-RUN MODE.  No changes will be made.')
        for repository in self.repositories:
            logger.info(
                'DRY-RUN: put snapshot repository "%s" of type %s',
                repository['name'], repository['type']
            )

    def do_action(self):
        """Put every repository concurrently"""
        fan_out(self.put, self.repositories, self.max_workers)
