"""Deployment descriptor Schema definitions"""
from voluptuous import Any, Optional, Schema

def artifact():
    """
    A pipeline, template or index entry. ``name`` and ``file`` are checked later, by
    :py:mod:`~.es_setup.helpers.testers`, so their messages name the entry.

    :rtype: :py:class:`~.voluptuous.schema_builder.Schema`
    """
    return Schema(
        {
            Optional('name'): Any(None, str),
            Optional('file'): Any(None, str),
            Optional('parameters'): Any(None, dict),
        },
        extra=True,
    )

def template():
    """An :py:func:`artifact` that may also ask for its aliases to be swapped"""
    schema = artifact().extend(
        {
            Optional('shouldSwapIndicesOfAliases'): Any(
                None, bool, {Optional('reindexPipeline'): Any(None, str)}
            ),
        }
    )
    return schema

def repository():
    """
    :rtype: :py:class:`~.voluptuous.schema_builder.Schema`
    """
    return Schema(
        {
            Optional('name'): Any(None, str),
            Optional('type'): Any(None, str),
            Optional('settings'): Any(None, dict),
        },
        extra=True,
    )

def target():
    """
    One entry of the ``custom.elasticsearch`` section

    :rtype: :py:class:`~.voluptuous.schema_builder.Schema`
    """
    return Schema(
        {
            Optional('endpoint'): Any(None, str),
            Optional('cf-endpoint'): Any(None, str),
            Optional('aws-profile'): Any(None, str),
            Optional('onlyOnRegion'): Any(None, str),
            Optional('pipelines', default=[]): Any(None, [dict]),
            Optional('templates', default=[]): Any(None, [dict]),
            Optional('indices', default=[]): Any(None, [dict]),
            Optional('repositories', default=[]): Any(None, [dict]),
        },
        extra=True,
    )

def provider():
    """The ``provider`` section, which supplies the default region and profile"""
    return Schema(
        {
            Optional('region'): Any(None, str),
            Optional('profile'): Any(None, str),
        },
        extra=True,
    )
