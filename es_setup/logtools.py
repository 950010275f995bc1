"""Logging tools"""
import sys
import json
import logging
import time
from pathlib import Path
import ecs_logging
from es_setup.exceptions import LoggingException

DEFAULT_FORMAT = '%(asctime)s %(levelname)-9s %(message)s'
DEBUG_FORMAT = (
    '%(asctime)s %(levelname)-9s %(name)22s %(funcName)22s:%(lineno)-4d %(message)s'
)

def is_docker():
    """Check if we're running in a docker container"""
    cgroup = Path('/proc/self/cgroup')
    return Path('/.dockerenv').is_file() or cgroup.is_file() and 'docker' in cgroup.read_text()

class LogstashFormatter(logging.Formatter):
    """One JSON document per record, for shipping to Logstash"""
    #: LogRecord attribute -> output key
    FIELDS = {
        'levelname': 'loglevel',
        'funcName': 'function',
        'lineno': 'linenum',
        'name': 'name',
    }
    #: Extra record attributes that are copied over when a caller sets them
    EXTRAS = ('alias', 'index', 'task_id', 'template')

    def format(self, record):
        """
        :param record: The incoming log message

        :rtype: str
        """
        self.converter = time.gmtime
        timestamp = '%s.%03dZ' % (
            self.formatTime(record, datefmt='%Y-%m-%dT%H:%M:%S'), record.msecs)
        try:
            result = {'@timestamp': timestamp, 'message': record.getMessage()}
        except (TypeError, ValueError) as err:
            raise LoggingException(f'Unable to format log message {record.msg!r}: {err}') from err
        for attribute, key in self.FIELDS.items():
            result[key] = getattr(record, attribute, None)
        for attribute in self.EXTRAS:
            if hasattr(record, attribute):
                result[attribute] = getattr(record, attribute)
        if record.exc_info:
            result['exception'] = self.formatException(record.exc_info)
        return json.dumps(result, sort_keys=True, default=str)

class Blacklist(logging.Filter):
    """Drop records from the named loggers and their children"""
    # pylint: disable=super-init-not-called
    def __init__(self, *blacklist):
        self.blacklist = [logging.Filter(name) for name in blacklist]

    def filter(self, record):
        return not any(f.filter(record) for f in self.blacklist)

class LogInfo:
    """Logging Class"""
    def __init__(self, cfg):
        """Class Setup

        :param cfg: The logging configuration, already validated by
            :py:func:`~.es_setup.validators.logconfig.config_logging`
        :type: cfg: dict
        """
        loglevel = cfg.get('loglevel') or 'INFO'
        logfile = cfg.get('logfile')
        logformat = cfg.get('logformat') or 'default'
        #: Attribute. The numeric equivalent of ``cfg['loglevel']``
        self.numeric_log_level = (
            loglevel if isinstance(loglevel, int)
            else getattr(logging, str(loglevel).upper(), None)
        )
        if not isinstance(self.numeric_log_level, int):
            raise ValueError(f'Invalid log level: {loglevel}')
        #: Attribute. The logging format string to use.
        self.format_string = DEBUG_FORMAT if self.numeric_log_level == 10 else DEFAULT_FORMAT
        #: Attribute. Which logging handler to use
        if logfile:
            self.handler = logging.FileHandler(logfile)
        elif is_docker():
            self.handler = logging.FileHandler('/proc/1/fd/1')
        else:
            self.handler = logging.StreamHandler(stream=sys.stdout)

        if logformat in ('json', 'logstash'):
            self.handler.setFormatter(LogstashFormatter())
        elif logformat == 'ecs':
            self.handler.setFormatter(ecs_logging.StdlibFormatter())
        else:
            self.handler.setFormatter(logging.Formatter(self.format_string))

        if cfg.get('blacklist'):
            self.handler.addFilter(Blacklist(*cfg['blacklist']))

def set_logging(cfg):
    """
    Attach a handler built by :py:class:`LogInfo` to the root logger

    :param cfg: The logging configuration
    :type cfg: dict

    :rtype: :py:class:`LogInfo`
    """
    loginfo = LogInfo(cfg)
    root = logging.getLogger()
    root.addHandler(loginfo.handler)
    root.setLevel(loginfo.numeric_log_level)
    return loginfo
