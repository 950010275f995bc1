"""Placeholder substitution for deployment descriptors

After a deployment, resources elsewhere in the descriptor (function environments,
outputs, ...) may need the names of the indices that were just created. They refer to
them with placeholders such as ``{{esSetup.template.indices: my_index}}``, where
``my_index`` is the unversioned name of the old index.
"""
import logging
import re
from es_setup.defaults.settings import PLACEHOLDER_NAMESPACE
from es_setup.helpers.versioning import strip_version

logger = logging.getLogger(__name__)


def build_variables(swaps):
    """
    :param swaps: Swap records, each ``{'alias', 'oldIndex', 'newIndex'}``

    :type swaps: list

    :returns: The placeholder namespace, with every new index name keyed by the
        unversioned name of the index it replaced
    :rtype: dict
    """
    indices = {}
    for swap in swaps:
        indices[strip_version(swap['oldIndex'])] = swap['newIndex']
    return {'template': {'indices': indices}}


def placeholder_pattern(open_delim='{{', close_delim='}}'):
    """
    :param open_delim: Opening delimiter
    :param close_delim: Closing delimiter

    :returns: A compiled pattern with the groups ``path`` and ``key``
    :rtype: :py:class:`re.Pattern`
    """
    return re.compile(
        re.escape(open_delim)
        + r'\s*' + re.escape(PLACEHOLDER_NAMESPACE) + r'\.(?P<path>[^:]+?)\s*:'
        + r'\s*(?P<key>.+?)\s*'
        + re.escape(close_delim)
    )


def lookup(variables, parts):
    """
    Walk ``variables`` along the dotted ``parts``. At each level the longest run of
    parts that is a key wins, so keys that contain dots (index names often do) still
    resolve.

    :param variables: The namespace to walk
    :param parts: The dotted path, already split on ``.``

    :type variables: dict
    :type parts: list

    :returns: ``(True, value)`` if the path resolves, otherwise ``(False, None)``
    :rtype: tuple
    """
    if not parts:
        return True, variables
    if not isinstance(variables, dict):
        return False, None
    for end in range(len(parts), 0, -1):
        key = '.'.join(parts[:end])
        if key in variables:
            found, value = lookup(variables[key], parts[end:])
            if found:
                return found, value
    return False, None


def replace_string(variables, value, pattern):
    """
    :param variables: The placeholder namespace
    :param value: A string that may hold placeholders
    :param pattern: From :py:func:`placeholder_pattern`

    :returns: ``value`` with every resolvable placeholder replaced
    :rtype: str
    """
    def _sub(match):
        parts = match.group('path').strip().split('.') + [match.group('key').strip()]
        found, resolved = lookup(variables, parts)
        if not found or resolved is None:
            logger.debug('Placeholder "%s" did not resolve', match.group(0))
            return match.group(0)
        return str(resolved)

    return pattern.sub(_sub, value)


def replace_placeholders(variables, node, open_delim='{{', close_delim='}}', pattern=None):
    """
    Replace placeholders everywhere in ``node``. Lists and dictionaries are changed
    in place, so the caller's descriptor is usable straight away, and ``node`` is
    also returned.

    :param variables: The namespace from :py:func:`build_variables`
    :param node: Any JSON-like value
    :param open_delim: Opening delimiter of placeholders
    :param close_delim: Closing delimiter of placeholders

    :type variables: dict

    :returns: ``node``, or the new string if ``node`` is a string
    """
    if pattern is None:
        pattern = placeholder_pattern(open_delim, close_delim)
    if isinstance(node, str):
        return replace_string(variables, node, pattern)
    if isinstance(node, list):
        for idx, item in enumerate(node):
            node[idx] = replace_placeholders(variables, item, pattern=pattern)
    elif isinstance(node, dict):
        for key, item in node.items():
            node[key] = replace_placeholders(variables, item, pattern=pattern)
    return node
