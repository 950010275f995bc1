"""Index setup action"""
import logging
from es_setup.defaults.settings import ALREADY_EXISTS
from es_setup.exceptions import SearchServerError
from es_setup.helpers.testers import validate_index, verify_client_object
from es_setup.helpers.utils import fan_out, load_artifact

logger = logging.getLogger(__name__)


class SetupIndices:
    """Setup Indices Action Class"""
    def __init__(self, client, indices=None, base_dir=None, max_workers=None):
        """
        :param client: A search client
        :param indices: Index descriptors, each with ``name``, ``file`` and optionally
            ``parameters``
        :param base_dir: Directory that relative ``file`` paths are resolved against
        :param max_workers: How many indices to create at once

        :type client: :py:class:`~.es_setup.client.SearchClient`
        :type indices: list
        :type base_dir: str
        :type max_workers: int
        """
        verify_client_object(client)
        self.client = client
        self.indices = indices or []
        for index in self.indices:
            validate_index(index)
        self.base_dir = base_dir
        self.max_workers = max_workers

    def load_body(self, index):
        """The index body (settings, mappings, aliases) with ``parameters`` applied"""
        return load_artifact(
            index['file'], parameters=index.get('parameters'), base_dir=self.base_dir
        )

    def create(self, index):
        """
        Create one index. An index that already exists is left alone.

        :param index: An index descriptor
        :type index: dict
        """
        name = index['name']
        logger.info('Creating index "%s"', name)
        try:
            self.client.put(f'/{name}', self.load_body(index))
        except SearchServerError as err:
            if err.error_type not in ALREADY_EXISTS:
                raise
            logger.warning('Index %s already exists.', name)

    def do_dry_run(self):
        """Log what the output would be, but take no action."""
        logger.info('DRY-RUN MODE.  No changes will be made.')
        for index in self.indices:
            logger.info('DRY-RUN: create index "%s": %s', index['name'], self.load_body(index))

    def do_action(self):
        """Create every index concurrently"""
        fan_out(self.create, self.indices, self.max_workers)
