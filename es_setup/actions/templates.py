"""Template setup action"""

import logging
from es_setup.actions.alias_swap import AliasSwap
from es_setup.debug import debug, begin_end
from es_setup.defaults.settings import NO_MAX_WAIT, RATE_LIMIT_WAIT_INTERVAL, TASK_WAIT_INTERVAL
from es_setup.exceptions import ResourceNotFound
from es_setup.helpers.testers import validate_template, verify_client_object
from es_setup.helpers.utils import fan_out, load_artifact

logger = logging.getLogger(__name__)


def swap_options(template):
    """
    :param template: A template descriptor

    :type template: dict

    :returns: ``(swap, pipeline)``: whether the indices behind the template's aliases
        should be swapped when its mappings change, and which ingest pipeline to
        reindex through. ``shouldSwapIndicesOfAliases`` may be a boolean, or a mapping
        with a ``reindexPipeline`` key.
    :rtype: tuple
    """
    option = template.get('shouldSwapIndicesOfAliases')
    if isinstance(option, dict):
        return True, option.get('reindexPipeline')
    return bool(option), None


def mappings_changed(previous, body):
    """
    :param previous: The template definition currently on the cluster
    :param body: The template body about to be sent

    :type previous: dict
    :type body: dict

    :returns: ``True`` if the ``mappings`` differ. ``order`` is ignored.
    :rtype: bool
    """
    previous = dict(previous)
    previous.pop('order', None)
    return previous.get('mappings') != body.get('mappings')


class SetupTemplates:
    """Setup Templates Action Class"""

    def __init__(
        self,
        client,
        templates=None,
        base_dir=None,
        max_workers=None,
        wait_interval=TASK_WAIT_INTERVAL,
        rate_limit_interval=RATE_LIMIT_WAIT_INTERVAL,
        max_wait=NO_MAX_WAIT,
    ):
        """
        :param client: A search client
        :param templates: Template descriptors, each with ``name``, ``file``, and
            optionally ``parameters`` and ``shouldSwapIndicesOfAliases``
        :param base_dir: Directory that relative ``file`` paths are resolved against
        :param max_workers: How many templates to deploy at once
        :param wait_interval: Seconds to wait between reindex task checks.
        :param rate_limit_interval: Seconds to wait after being rate limited.
        :param max_wait: Maximum number of seconds to wait for each reindex.

        :type client: :py:class:`~.es_setup.client.SearchClient`
        :type templates: list
        :type base_dir: str
        :type max_workers: int
        """
        verify_client_object(client)
        #: The :py:class:`~.es_setup.client.SearchClient` object
        self.client = client
        #: The template descriptors. All are validated before anything is sent.
        self.templates = templates or []
        for template in self.templates:
            validate_template(template)
        self.base_dir = base_dir
        self.max_workers = max_workers
        #: Keyword arguments handed to every :py:class:`~.es_setup.actions.AliasSwap`
        self.swap_kwargs = {
            'wait_interval': wait_interval,
            'rate_limit_interval': rate_limit_interval,
            'max_wait': max_wait,
        }

    def load_body(self, template):
        """
        :returns: The template body with its ``parameters`` applied
        :rtype: dict
        """
        return load_artifact(
            template['file'], parameters=template.get('parameters'), base_dir=self.base_dir
        )

    def previous_template(self, name):
        """
        :param name: The template name

        :returns: The template currently stored as ``name``, or ``None``
        :rtype: dict
        """
        try:
            response = self.client.get(f'/_template/{name}')
        except ResourceNotFound:
            logger.info('No previous template "%s" found.', name)
            return None
        return (response or {}).get(name)

    def swaps_needed(self, name, body):
        """
        :param name: The template name
        :param body: The new template body

        :returns: The aliases of the previous template whose indices must be swapped.
            Empty if there is no previous template, or its mappings are unchanged.
        :rtype: list
        """
        previous = self.previous_template(name)
        if previous is None:
            return []
        if not mappings_changed(previous, body):
            logger.info('Mappings of template "%s" are unchanged.', name)
            return []
        aliases = list(previous.get('aliases') or {})
        logger.info('Mappings of template "%s" changed. Aliases to swap: %s', name, aliases)
        return aliases

    @begin_end()
    def deploy_template(self, template):
        """
        Deploy one template, swapping the indices behind its previous aliases first if
        its mappings changed and swapping was asked for.

        :param template: A template descriptor

        :returns: A copy of ``template`` with the ``swaps`` performed
        :rtype: dict
        """
        name = template['name']
        body = self.load_body(template)
        swaps = []
        swap, pipeline = swap_options(template)
        if swap:
            for alias in self.swaps_needed(name, body):
                swapper = AliasSwap(
                    self.client, alias=alias, reindex_pipeline=pipeline, **self.swap_kwargs
                )
                swaps.extend(swapper.do_action())
        logger.info('Putting template "%s"', name)
        self.client.put(f'/_template/{name}', body)
        debug.lv5('Template "%s" swaps: %s', name, swaps)
        result = dict(template)
        result['swaps'] = swaps
        return result

    def do_dry_run(self):
        """Log what the output would be, but take no action."""
        logger.info('DRY-RUN MODE.  No changes will be made.')
        for template in self.templates:
            body = self.load_body(template)
            swap, pipeline = swap_options(template)
            if swap:
                for alias in self.swaps_needed(template['name'], body):
                    AliasSwap(
                        self.client, alias=alias, reindex_pipeline=pipeline,
                        **self.swap_kwargs
                    ).do_dry_run()
            logger.info('DRY-RUN: put template "%s": %s', template['name'], body)

    @begin_end()
    def do_action(self):
        """
        Deploy every template concurrently.

        :returns: ``{'templates': [...]}``, each template with its ``swaps``, in the
            order they were given
        :rtype: dict
        """
        results = fan_out(self.deploy_template, self.templates, self.max_workers)
        return {'templates': results}
