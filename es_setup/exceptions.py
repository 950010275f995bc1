"""es-setup Exceptions"""
class EsSetupException(Exception):
    """
    Base class for all exceptions raised by es-setup which are not Elasticsearch
    exceptions.
    """

class ConfigurationError(EsSetupException):
    """
    Exception raised when a misconfiguration is detected, such as a template, index,
    pipeline or repository missing a required field.
    """

class FeatureNotSupported(EsSetupException):
    """
    Exception raised when the deployment descriptor asks for something es-setup does
    not implement.
    """

class ClientException(EsSetupException):
    """
    Exception raised when the Elasticsearch client and/or connection is the source of
    the problem.
    """

class FailedExecution(EsSetupException):
    """
    Exception raised when an action fails to execute for some reason.
    """

class ActionTimeout(EsSetupException):
    """
    Exception raised when an action fails to complete in the allotted time
    """

class LoggingException(EsSetupException):
    """
    Exception raised when es-setup cannot either log or configure logging
    """

class SearchServerError(EsSetupException):
    """
    Exception raised when the cluster answers with a non-2xx status.

    :param status_code: The HTTP status code
    :param server_message: The response body, or the error message when there is none
    :param error_type: The ``error.type`` from the response body, if present

    :type status_code: int
    :type server_message: str or dict
    :type error_type: str
    """
    def __init__(self, status_code, server_message=None, error_type=None):
        self.status_code = status_code
        self.server_message = server_message
        self.error_type = error_type
        super().__init__(f'HTTP {status_code}: {server_message}')

class ResourceNotFound(SearchServerError):
    """
    Exception raised when a GET returns 404. Callers treat it as "no previous state".
    """

class RateLimited(SearchServerError):
    """
    Exception raised when the cluster answers 429 Too Many Requests
    """

class MissingArgument(EsSetupException):
    """
    Exception raised when a needed argument is not passed.
    """
