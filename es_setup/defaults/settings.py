"""Default values and small helpers for es-setup"""

from es_setup.exceptions import FeatureNotSupported

PROJECT_DOCS = 'https://github.com/es-setup/es-setup'

#: Seconds between ``_tasks`` polls while a reindex is running
TASK_WAIT_INTERVAL = 15
#: Seconds to back off for one cycle after the cluster answers 429
RATE_LIMIT_WAIT_INTERVAL = 300
#: ``max_wait`` value meaning "wait forever"
NO_MAX_WAIT = -1

#: Where the Elasticsearch section lives inside a deployment descriptor
DESCRIPTOR_SECTION = ('custom', 'elasticsearch')
#: Namespace prefix of every placeholder token
PLACEHOLDER_NAMESPACE = 'esSetup'

#: Error types meaning "the index is already there"
ALREADY_EXISTS = ['index_already_exists_exception', 'resource_already_exists_exception']

CLICK_DRYRUN = {
    'dry-run': {'help': 'Do not perform any changes.', 'is_flag': True},
}


def placeholder_delimiters(style='braces'):
    """
    :param style: ``braces`` for ``{{esSetup.path: key}}``, or ``dollar`` for the
        older ``${esSetup.path: key}`` form

    :type style: str

    :returns: The opening and closing delimiters for placeholder tokens
    :rtype: tuple
    """
    styles = {
        'braces': ('{{', '}}'),
        'dollar': ('${', '}'),
    }
    if style not in styles:
        raise FeatureNotSupported(
            f'Placeholder style "{style}" is not supported. Use one of {sorted(styles)}'
        )
    return styles[style]


def footer(version, tail=''):
    """
    Generate a footer linking to the project docs

    :param version: The es-setup version

    :type version: str

    :returns: An epilog/footer suitable for Click
    """
    return f'es-setup {version}. Learn more at {PROJECT_DOCS}{tail}'


def aws_partition(region):
    """
    :param region: An AWS region name

    :type region: str

    :returns: The AWS partition for ``region``: ``aws-cn``, ``aws-us-gov`` or ``aws``
    :rtype: str
    """
    if region and region.startswith('cn-'):
        return 'aws-cn'
    if region and region.startswith('us-gov'):
        return 'aws-us-gov'
    return 'aws'
