"""Utility functions that validate descriptor entries before anything is sent"""

from es_setup.client import SearchClient
from es_setup.exceptions import ConfigurationError


def _require(entity, item, field, description):
    if not isinstance(item, dict):
        raise ConfigurationError(f'{entity} definition must be a mapping, not {type(item)}')
    if not item.get(field):
        name = item.get('name')
        label = f'{entity} "{name}"' if name and field != 'name' else entity
        raise ConfigurationError(f'{label} does not have a {description}.')


def validate_template(template):
    """
    :param template: A template descriptor

    :type template: dict

    :raises: :py:exc:`~.es_setup.exceptions.ConfigurationError` if ``name`` or
        ``file`` is missing
    """
    _require('Template', template, 'name', 'name')
    _require('Template', template, 'file', 'file location')


def validate_index(index):
    """
    :param index: An index descriptor

    :type index: dict

    :raises: :py:exc:`~.es_setup.exceptions.ConfigurationError` if ``name`` or
        ``file`` is missing
    """
    _require('Index', index, 'name', 'name')
    _require('Index', index, 'file', 'file location')


def validate_pipeline(pipeline):
    """
    :param pipeline: An ingest pipeline descriptor

    :type pipeline: dict

    :raises: :py:exc:`~.es_setup.exceptions.ConfigurationError` if ``name`` or
        ``file`` is missing
    """
    _require('Pipeline', pipeline, 'name', 'name')
    _require('Pipeline', pipeline, 'file', 'file location')


def validate_repository(repository):
    """
    :param repository: A snapshot repository descriptor

    :type repository: dict

    :raises: :py:exc:`~.es_setup.exceptions.ConfigurationError` if ``name`` or
        ``type`` is missing
    """
    _require('Repo', repository, 'name', 'name')
    _require('Repo', repository, 'type', 'type')


def verify_client_object(test):
    """
    :param test: The variable or object to test

    :raises: :py:exc:`TypeError` if ``test`` is not a
        :py:class:`~.es_setup.client.SearchClient`
    """
    # Ignore mock type for testing
    if str(type(test)) == "<class 'unittest.mock.Mock'>":
        return
    if not isinstance(test, SearchClient):
        raise TypeError(f'Not a valid client object. Type: {type(test)} was passed')
