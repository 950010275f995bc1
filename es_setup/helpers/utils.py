"""Helper utilities

The kind that don't fit in versioning, substitute, waiters, or aws
"""

import json
import logging
import re
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
import yaml
from es_setup.exceptions import ConfigurationError, FailedExecution

logger = logging.getLogger(__name__)

PARAMETER_PATTERN = re.compile(r'\$\{([^}]+)\}')


def report_failure(exception):
    """
    Raise a :py:exc:`~.es_setup.exceptions.FailedExecution` exception and include
    the original error message.

    :param exception: The upstream exception.

    :type exception: :py:exc:Exception

    :rtype: None
    """
    raise FailedExecution(
        f'Exception encountered.  Rerun with loglevel DEBUG and/or check '
        f'Elasticsearch logs for more information. Exception: {exception}'
    ) from exception


def replace_parameters(text, parameters=None):
    """
    Replace every ``${KEY}`` token in ``text`` whose ``KEY`` is in ``parameters``.
    Tokens without a matching parameter are left as they are.

    :param text: The raw artifact text
    :param parameters: ``KEY: value`` pairs

    :type text: str
    :type parameters: dict

    :rtype: str
    """
    if not parameters:
        return text

    def _sub(match):
        key = match.group(1)
        if key in parameters:
            return str(parameters[key])
        return match.group(0)

    return PARAMETER_PATTERN.sub(_sub, text)


def load_artifact(filename, parameters=None, base_dir=None):
    """
    Read an artifact body (template, index, or pipeline definition), apply
    ``parameters`` to the raw text, then parse it. Files ending in ``.yml`` or
    ``.yaml`` are parsed as YAML, everything else as JSON.

    :param filename: Path to the artifact. Relative paths are resolved against
        ``base_dir`` (or the current directory)
    :param parameters: ``KEY: value`` pairs for :py:func:`replace_parameters`
    :param base_dir: Directory relative paths are resolved against

    :type filename: str
    :type parameters: dict
    :type base_dir: str

    :returns: The parsed artifact body
    :rtype: dict
    """
    path = Path(filename)
    if base_dir and not path.is_absolute():
        path = Path(base_dir) / path
    try:
        raw = path.read_text(encoding='utf-8')
    except OSError as err:
        raise ConfigurationError(f'Unable to read artifact "{path}": {err}') from err
    text = replace_parameters(raw, parameters)
    try:
        if path.suffix in ('.yml', '.yaml'):
            return yaml.safe_load(text)
        return json.loads(text)
    except (ValueError, yaml.YAMLError) as err:
        raise ConfigurationError(f'Unable to parse artifact "{path}": {err}') from err


def ensure_scheme(endpoint):
    """
    :param endpoint: A domain name or URL

    :type endpoint: str

    :returns: ``endpoint`` with ``https://`` prepended if it has no ``http`` scheme
    :rtype: str
    """
    if endpoint.startswith('http'):
        return endpoint
    return f'https://{endpoint}'


def fan_out(func, items, max_workers=None):
    """
    Call ``func`` on every item of ``items`` concurrently and return the results in
    input order. The first exception raised by any call is re-raised after every
    call that has not started yet is cancelled. Calls already running are allowed
    to finish.

    :param func: A callable taking one item
    :param items: The items
    :param max_workers: Thread pool size (``None`` lets
        :py:class:`~.concurrent.futures.ThreadPoolExecutor` decide)

    :type func: callable
    :type items: list
    :type max_workers: int

    :rtype: list
    """
    if not items:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(func, item) for item in items]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in futures:
            if future in done and future.exception() is not None:
                for waiting in pending:
                    waiting.cancel()
                raise future.exception()
        return [future.result() for future in futures]
