"""Ingest pipeline setup action"""
import logging
from es_setup.helpers.testers import validate_pipeline, verify_client_object
from es_setup.helpers.utils import fan_out, load_artifact

logger = logging.getLogger(__name__)


class SetupPipelines:
    """Setup Ingest Pipelines Action Class"""
    def __init__(self, client, pipelines=None, base_dir=None, max_workers=None):
        """
        :param client: A search client
        :param pipelines: Pipeline descriptors, each with ``name``, ``file`` and
            optionally ``parameters``
        :param base_dir: Directory that relative ``file`` paths are resolved against
        :param max_workers: How many pipelines to put at once
        """
        verify_client_object(client)
        self.client = client
        self.pipelines = pipelines or []
        for pipeline in self.pipelines:
            validate_pipeline(pipeline)
        self.base_dir = base_dir
        self.max_workers = max_workers

    def load_body(self, pipeline):
        """The pipeline definition with ``parameters`` applied"""
        return load_artifact(
            pipeline['file'], parameters=pipeline.get('parameters'), base_dir=self.base_dir
        )

    def put(self, pipeline):
        """PUT one pipeline"""
        logger.info('Putting ingest pipeline "%s"', pipeline['name'])
        self.client.put(f"/_ingest/pipeline/{pipeline['name']}", self.load_body(pipeline))

    def do_dry_run(self):
        """Log what the output would be, but take no action."""
        logger.info('DRY-RUN MODE.  No changes will be made.')
        for pipeline in self.pipelines:
            logger.info(
                'DRY-RUN: put ingest pipeline "%s": %s', pipeline['name'], self.load_body(pipeline)
            )

    def do_action(self):
        """Put every pipeline concurrently"""
        fan_out(self.put, self.pipelines, self.max_workers)
