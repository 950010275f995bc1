"""Logging Schema definition"""
from voluptuous import All, Any, Coerce, Optional, Schema

def config_logging():
    """
    Logging schema with defaults:

    .. code-block:: yaml

        logging:
          loglevel: INFO
          logfile: None
          logformat: default
          blacklist: ['elastic_transport', 'urllib3', 'botocore']

    :returns: A valid :py:class:`~.voluptuous.schema_builder.Schema` of all acceptable
        values with the default values set.
    :rtype: :py:class:`~.voluptuous.schema_builder.Schema`
    """
    return Schema(
        {
            Optional('loglevel', default='INFO'): Any(
                None,
                'NOTSET', 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL',
                All(Coerce(int), Any(0, 10, 20, 30, 40, 50)),
            ),
            Optional('logfile', default=None): Any(None, str),
            Optional('logformat', default='default'): Any(
                None, All(str, Any('default', 'json', 'logstash', 'ecs'))
            ),
            Optional(
                'blacklist', default=['elastic_transport', 'urllib3', 'botocore']
            ): Any(None, list),
        }
    )
