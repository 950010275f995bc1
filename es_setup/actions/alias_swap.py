"""Alias swap action"""

import logging
from es_setup.debug import debug, begin_end
from es_setup.defaults.settings import NO_MAX_WAIT, RATE_LIMIT_WAIT_INTERVAL, TASK_WAIT_INTERVAL
from es_setup.exceptions import EsSetupException, MissingArgument, ResourceNotFound
from es_setup.helpers.utils import report_failure
from es_setup.helpers.versioning import increment, strip_version
from es_setup.helpers.waiters import wait_for_task

logger = logging.getLogger(__name__)


class AliasSwap:
    """Alias Swap Action Class

    Moves every index behind an alias to a new version of itself: create the new
    index, reindex into it, wait for the reindex task, then repoint the alias and
    delete the old index in one ``_aliases`` request.
    """

    def __init__(
        self,
        client,
        alias=None,
        reindex_pipeline=None,
        wait_interval=TASK_WAIT_INTERVAL,
        rate_limit_interval=RATE_LIMIT_WAIT_INTERVAL,
        max_wait=NO_MAX_WAIT,
    ):
        """
        :param client: A search client
        :param alias: The alias whose indices will be swapped
        :param reindex_pipeline: An ingest pipeline to run documents through while
            reindexing
        :param wait_interval: Seconds to wait between reindex task checks.
        :param rate_limit_interval: Seconds to wait after being rate limited.
        :param max_wait: Maximum number of seconds to wait for each reindex. ``-1``
            waits forever.

        :type client: :py:class:`~.es_setup.client.SearchClient`
        :type alias: str
        :type reindex_pipeline: str
        :type wait_interval: int
        :type rate_limit_interval: int
        :type max_wait: int
        """
        if not alias:
            raise MissingArgument('No value for "alias" provided.')
        #: The :py:class:`~.es_setup.client.SearchClient` object
        self.client = client
        #: The alias name
        self.alias = alias
        #: Object attribute that gets the value of param ``reindex_pipeline``.
        self.pipeline = reindex_pipeline
        self.wait_interval = wait_interval
        self.rate_limit_interval = rate_limit_interval
        self.max_wait = max_wait
        #: One ``{'alias', 'oldIndex', 'newIndex'}`` record per swapped index,
        #: populated by :py:meth:`do_action`
        self.swaps = []

    def current_indices(self):
        """
        :returns: The indices bound to :py:attr:`alias`, in response order. Empty if
            the alias does not exist.
        :rtype: list
        """
        try:
            response = self.client.get(f'/_alias/{self.alias}')
        except ResourceNotFound:
            logger.info('Alias "%s" not found. Nothing to swap.', self.alias)
            return []
        return list(response or {})

    def alias_actions(self, index, new_index):
        """
        :param index: The current index
        :param new_index: The index replacing it

        :returns: The ``_aliases`` actions, in order: alias the unversioned name of
            ``index`` to ``new_index``, add ``new_index`` to :py:attr:`alias`, and
            remove ``index`` altogether.
        :rtype: list
        """
        return [
            {'add': {'index': new_index, 'alias': strip_version(index)}},
            {'add': {'index': new_index, 'alias': self.alias}},
            {'remove_index': {'index': index}},
        ]

    def reindex_body(self, index, new_index):
        """
        :returns: The ``_reindex`` request body for ``index`` -> ``new_index``
        :rtype: dict
        """
        return {
            'source': {'index': index},
            'dest': {'index': new_index, 'pipeline': self.pipeline},
        }

    def do_dry_run(self):
        """Log what the output would be, but take no action."""
        logger.info('DRY-RUN MODE.  No changes will be made.')
        for index in self.current_indices():
            new_index = increment(index)
            logger.info(
                'DRY-RUN: alias_swap: alias "%s": reindex "%s" into "%s" with pipeline %s, '
                'then actions %s', self.alias, index, new_index, self.pipeline,
                self.alias_actions(index, new_index)
            )

    def _step(self, description, func, *args):
        try:
            return func(*args)
        except EsSetupException as err:
            logger.error('Unable to %s: %s', description, err)
            raise
        except Exception as err:
            logger.error('Unable to %s: %s', description, err)
            report_failure(err)

    @begin_end()
    def swap_index(self, index):
        """
        Swap a single index. Each step must finish before the next one starts.

        :param index: An index currently bound to :py:attr:`alias`

        :returns: The swap record
        :rtype: dict
        """
        new_index = increment(index)
        logger.info('Swapping index "%s" to "%s" on alias "%s"', index, new_index, self.alias)
        self._step(f'create index "{new_index}"', self.client.put, f'/{new_index}', {})
        response = self._step(
            f'reindex "{index}" into "{new_index}"',
            self.client.post,
            '/_reindex?wait_for_completion=false',
            self.reindex_body(index, new_index),
        )
        task_id = (response or {}).get('task')
        debug.lv3('Reindex task for "%s": %s', index, task_id)
        self._step(
            f'wait for reindex task "{task_id}"',
            wait_for_task,
            self.client,
            task_id,
            self.wait_interval,
            self.rate_limit_interval,
            self.max_wait,
        )
        self._step(
            f'update aliases for "{new_index}"',
            self.client.post,
            '/_aliases',
            {'actions': self.alias_actions(index, new_index)},
        )
        return {'alias': self.alias, 'oldIndex': index, 'newIndex': new_index}

    @begin_end()
    def do_action(self):
        """
        Swap every index behind :py:attr:`alias`. Indices swapped before a failure
        stay swapped.

        :returns: :py:attr:`swaps`
        :rtype: list
        """
        for index in self.current_indices():
            self.swaps.append(self.swap_index(index))
        logger.info('Swapped %s indices on alias "%s"', len(self.swaps), self.alias)
        return self.swaps
