"""Deploy every target of a descriptor, then write the new index names back into it"""

import logging
from es_setup.actions import SetupIndices, SetupPipelines, SetupRepositories, SetupTemplates
from es_setup.classdef import Descriptor, TargetDef
from es_setup.client import SearchClient, build_client
from es_setup.debug import begin_end
from es_setup.defaults.settings import (
    NO_MAX_WAIT,
    RATE_LIMIT_WAIT_INTERVAL,
    TASK_WAIT_INTERVAL,
    placeholder_delimiters,
)
from es_setup.exceptions import ConfigurationError
from es_setup.helpers.aws import AwsSigner, find_cloudformation_export, get_session
from es_setup.helpers.substitute import build_variables, replace_placeholders
from es_setup.helpers.utils import ensure_scheme

logger = logging.getLogger(__name__)


class AwsContext:
    """Lazily created AWS session and clients for one target"""

    def __init__(self, profile=None, region=None, cf_client=None, sts_client=None):
        self.profile = profile
        self.region = region
        self._session = None
        self._cf_client = cf_client
        self._sts_client = sts_client

    @property
    def session(self):
        """The boto3 session, created on first use"""
        if self._session is None:
            self._session = get_session(profile=self.profile, region=self.region)
        return self._session

    @property
    def cf_client(self):
        """CloudFormation client"""
        if self._cf_client is None:
            self._cf_client = self.session.client('cloudformation')
        return self._cf_client

    @property
    def sts_client(self):
        """STS client"""
        if self._sts_client is None:
            self._sts_client = self.session.client('sts')
        return self._sts_client

    def signer(self):
        """
        :returns: A SigV4 signer for the ``es`` service in :py:attr:`region`
        :rtype: :py:class:`~.es_setup.helpers.aws.AwsSigner`
        """
        return AwsSigner(self.session.get_credentials(), self.region)


def resolve_endpoint(target_def, aws):
    """
    :param target_def: The target
    :param aws: AWS collaborators for the target

    :type target_def: :py:class:`~.es_setup.classdef.TargetDef`
    :type aws: :py:class:`AwsContext`

    :returns: The cluster URL, with ``https://`` added if no scheme was given
    :rtype: str
    """
    endpoint = target_def.endpoint
    if not endpoint and target_def.cf_endpoint:
        endpoint = find_cloudformation_export(aws.cf_client, target_def.cf_endpoint)
        if not endpoint:
            raise ConfigurationError('Endpoint not found at cloudformation export.')
        logger.info(
            'Endpoint from CloudFormation export "%s": %s', target_def.cf_endpoint, endpoint
        )
    if not endpoint:
        raise ConfigurationError('Elasticsearch endpoint not specified.')
    return ensure_scheme(endpoint)


def needs_account_id(target_def):
    """
    :returns: ``True`` if any repository of the target is an ``s3`` repository that
        names its role with ``role_name``
    :rtype: bool
    """
    return any(
        repo.get('type') == 's3' and (repo.get('settings') or {}).get('role_name')
        for repo in target_def.repositories
    )


@begin_end()
def deploy_target(
    target,
    region=None,
    profile=None,
    base_dir=None,
    dry_run=False,
    wait_interval=TASK_WAIT_INTERVAL,
    rate_limit_interval=RATE_LIMIT_WAIT_INTERVAL,
    max_wait=NO_MAX_WAIT,
    request_timeout=30,
    max_workers=None,
    client=None,
    cf_client=None,
    sts_client=None,
):
    """
    Deploy one target: pipelines, then templates, then indices, then repositories.

    :param target: One target of the ``custom.elasticsearch`` section
    :param region: The region being deployed to
    :param profile: The deployment's AWS profile, used when the target names none
    :param base_dir: Directory that artifact ``file`` paths are relative to
    :param dry_run: Log what would be done without changing the cluster
    :param wait_interval: Seconds between reindex task checks
    :param rate_limit_interval: Seconds to back off after a 429
    :param max_wait: Seconds to wait for a reindex before giving up. ``-1`` waits
        forever.
    :param request_timeout: Seconds before a single request times out
    :param max_workers: How many items of one kind to deploy at once
    :param client: An existing search client. Built from the target if ``None``.
    :param cf_client: A boto3 CloudFormation client to use instead of a new one
    :param sts_client: A boto3 STS client to use instead of a new one

    :type target: dict or :py:class:`~.es_setup.classdef.TargetDef`
    :type client: :py:class:`~.es_setup.client.SearchClient`

    :returns: The swap records of every template deployed to this target
    :rtype: list
    """
    target_def = target if isinstance(target, TargetDef) else TargetDef(target)
    if target_def.skip_for_region(region):
        logger.info(
            'Skipping target: onlyOnRegion is %s, deploying to %s',
            target_def.only_on_region, region,
        )
        return []
    aws_profile = target_def.aws_profile or profile
    aws = AwsContext(
        profile=aws_profile, region=region, cf_client=cf_client, sts_client=sts_client
    )
    if client is None:
        base_url = resolve_endpoint(target_def, aws)
        signer = aws.signer() if aws_profile else None
        logger.info('Deploying to %s%s', base_url, ' (signed)' if signer else '')
        client = SearchClient(
            build_client(base_url, request_timeout=request_timeout), base_url, signer=signer
        )
    waiter_kwargs = {
        'wait_interval': wait_interval,
        'rate_limit_interval': rate_limit_interval,
        'max_wait': max_wait,
    }
    sts = aws.sts_client if needs_account_id(target_def) and not dry_run else None
    # Every stage validates its entries here, before anything is sent to the cluster
    stages = [
        ('pipelines', SetupPipelines(
            client, target_def.pipelines, base_dir=base_dir, max_workers=max_workers)),
        ('templates', SetupTemplates(
            client, target_def.templates, base_dir=base_dir, max_workers=max_workers,
            **waiter_kwargs)),
        ('indices', SetupIndices(
            client, target_def.indices, base_dir=base_dir, max_workers=max_workers)),
        ('repositories', SetupRepositories(
            client, target_def.repositories, sts_client=sts, max_workers=max_workers)),
    ]
    swaps = []
    for name, action in stages:
        logger.info('Setting up %s...', name)
        if dry_run:
            action.do_dry_run()
            continue
        result = action.do_action()
        if name == 'templates':
            for template in result['templates']:
                swaps.extend(template['swaps'])
    return swaps


@begin_end()
def deploy(
    descriptor,
    region=None,
    profile=None,
    base_dir=None,
    placeholder_style='braces',
    **kwargs,
):
    """
    Deploy every target of ``descriptor``, then replace the placeholders in the
    whole descriptor with the names of the indices created by alias swaps.

    :param descriptor: The deployment descriptor
    :param region: The region being deployed to. Defaults to ``provider.region``.
    :param profile: The AWS profile. Defaults to ``provider.profile``.
    :param base_dir: Directory that artifact ``file`` paths are relative to
    :param placeholder_style: ``braces`` or ``dollar``
    :param kwargs: Passed to :py:func:`deploy_target`

    :type descriptor: dict or :py:class:`~.es_setup.classdef.Descriptor`

    :returns: Every swap record, in target order
    :rtype: list
    """
    desc = descriptor if isinstance(descriptor, Descriptor) else Descriptor(
        descriptor, base_dir=base_dir
    )
    open_delim, close_delim = placeholder_delimiters(placeholder_style)
    region = region or desc.region
    profile = profile or desc.profile
    if not desc.targets:
        logger.warning('No Elasticsearch targets found in the descriptor.')
    swaps = []
    for target_def in desc.targets:
        swaps.extend(
            deploy_target(
                target_def,
                region=region,
                profile=profile,
                base_dir=desc.base_dir if base_dir is None else base_dir,
                **kwargs,
            )
        )
    variables = build_variables(swaps)
    logger.debug('Placeholder variables: %s', variables)
    replace_placeholders(variables, desc.data, open_delim, close_delim)
    return swaps
