"""Index name versioning

Versioned index names look like ``<base>_v<N>``. A name without a marker is version 0.
"""
import re

VERSION_PATTERN = re.compile(r'^(.*)_v(\d*)$')


def parse_version(name):
    """
    :param name: An index name

    :type name: str

    :returns: ``(base, version)``. Names like ``MyName_v1_v1`` only have their final
        marker parsed, so the base is ``MyName_v1``.
    :rtype: tuple
    """
    match = VERSION_PATTERN.match(name)
    if not match:
        return name, 0
    base, digits = match.groups()
    return base, int(digits) if digits else 0


def increment(name):
    """
    :param name: An index name

    :type name: str

    :returns: ``name`` with its version bumped by one, e.g. ``logs`` -> ``logs_v1``
        and ``logs_v1`` -> ``logs_v2``
    :rtype: str
    """
    base, version = parse_version(name)
    return f'{base}_v{version + 1}'


def strip_version(name):
    """
    :param name: An index name

    :type name: str

    :returns: ``name`` without its version marker, or ``name`` unchanged if it has none
    :rtype: str
    """
    return parse_version(name)[0]
