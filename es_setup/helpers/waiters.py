"""The function that waits

...and its helper
"""
import logging
from time import sleep
from datetime import datetime
from es_setup.defaults.settings import NO_MAX_WAIT, RATE_LIMIT_WAIT_INTERVAL, TASK_WAIT_INTERVAL
from es_setup.exceptions import ActionTimeout, MissingArgument, RateLimited, ResourceNotFound

logger = logging.getLogger(__name__)


def find_task(tasks, task_id):
    """
    :param tasks: The ``GET /_tasks`` response body
    :param task_id: A task id of the form ``<node>:<sequence>``

    :type tasks: dict
    :type task_id: str

    :returns: The task entry from the node bucket named by the first part of
        ``task_id``, or ``None`` if it is not there
    :rtype: dict
    """
    node = task_id.split(':')[0]
    nodes = (tasks or {}).get('nodes') or {}
    bucket = (nodes.get(node) or {}).get('tasks') or {}
    return bucket.get(task_id)


def task_check(client, task_id):
    """
    Poll ``GET /_tasks`` once.

    :param client: A search client
    :param task_id: The task id

    :type client: :py:class:`~.es_setup.client.SearchClient`
    :type task_id: str

    :returns: ``True`` if the task is gone from the task list or reports
        ``completed``, otherwise ``False``
    :rtype: bool
    """
    task = find_task(client.get('/_tasks'), task_id)
    if task is None:
        logger.info('Task "%s" is no longer listed. Treating it as complete.', task_id)
        return True
    if task.get('completed'):
        logger.info('Task "%s" completed.', task_id)
        return True
    running_time = 0.000000001 * task.get('running_time_in_nanos', 0)
    logger.info(
        'Task "%s" (%s) has been running for %s seconds',
        task_id, task.get('description', ''), running_time
    )
    return False


def wait_for_task(
        client, task_id, wait_interval=TASK_WAIT_INTERVAL,
        rate_limit_interval=RATE_LIMIT_WAIT_INTERVAL, max_wait=NO_MAX_WAIT
    ):
    """
    Block until the asynchronous task ``task_id`` is finished.

    A 404 from the task list means the task vanished, which only happens once it
    finished, so that counts as done. A 429 waits ``rate_limit_interval`` seconds
    before the next poll instead of ``wait_interval``. Every other error is raised.

    :param client: A search client
    :param task_id: The task id returned by the asynchronous request
    :param wait_interval: Seconds to wait between completion checks.
    :param rate_limit_interval: Seconds to wait after being rate limited.
    :param max_wait: Maximum number of seconds to wait. ``-1`` waits forever.

    :type client: :py:class:`~.es_setup.client.SearchClient`
    :type task_id: str
    :type wait_interval: int
    :type rate_limit_interval: int
    :type max_wait: int
    :rtype: None
    """
    if not task_id:
        raise MissingArgument('A task_id is required to wait for a task')
    start_time = datetime.now()
    while True:
        interval = wait_interval
        try:
            if task_check(client, task_id):
                return
        except ResourceNotFound:
            logger.info('Task list returned 404 for "%s". Treating it as complete.', task_id)
            return
        except RateLimited:
            logger.warning(
                'Rate limited while checking task "%s". Waiting %s seconds.',
                task_id, rate_limit_interval
            )
            interval = rate_limit_interval
        elapsed = int((datetime.now() - start_time).total_seconds())
        if max_wait != NO_MAX_WAIT and elapsed >= max_wait:
            msg = f'Task "{task_id}" did not complete within max_wait ({max_wait}) seconds.'
            logger.error(msg)
            raise ActionTimeout(msg)
        logger.debug(
            'Task "%s" not yet complete, %s total seconds elapsed. '
            'Waiting %s seconds before checking again.', task_id, elapsed, interval
        )
        sleep(interval)
