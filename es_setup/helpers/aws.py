"""AWS collaborators

Request signing, CloudFormation export lookup, and account discovery.
"""
import logging
from urllib.parse import urlparse
import boto3
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.exceptions import BotoCoreError, ClientError
from es_setup.defaults.settings import aws_partition
from es_setup.exceptions import ClientException

logger = logging.getLogger(__name__)


def get_session(profile=None, region=None):
    """
    :param profile: A named profile from the shared AWS config/credentials files
    :param region: The AWS region

    :returns: A boto3 session for ``profile`` (or the default credential chain)
    :rtype: :py:class:`~.boto3.session.Session`
    """
    try:
        return boto3.Session(profile_name=profile, region_name=region)
    except BotoCoreError as err:
        raise ClientException(f'Unable to create an AWS session: {err}') from err


class AwsSigner:
    """Signs cluster requests with AWS Signature Version 4"""

    def __init__(self, credentials, region, service='es'):
        """
        :param credentials: botocore credentials, e.g. from
            :py:meth:`~.boto3.session.Session.get_credentials`
        :param region: The region of the search domain
        :param service: The signing service name
        """
        if credentials is None:
            raise ClientException('No AWS credentials found to sign requests with')
        self.credentials = credentials
        self.region = region
        self.service = service

    def sign(self, method, url, headers, body):
        """
        :param method: HTTP method
        :param url: The full request URL
        :param headers: Headers already on the request
        :param body: The serialized request body, or ``None``

        :returns: ``headers`` plus the SigV4 authentication headers
        :rtype: dict
        """
        # Only host is signed. The transport may rewrite the content type and accept
        # headers after signing. The port can't be part of the signed host.
        aws_request = AWSRequest(
            method=method, url=url, data=body, headers={'host': urlparse(url).hostname}
        )
        signer = SigV4Auth(self.credentials, self.service, self.region)
        aws_request.headers['x-amz-content-sha256'] = signer.payload(aws_request)
        signer.add_auth(aws_request)
        signed = dict(headers)
        signed.update(aws_request.headers.items())
        return signed


def find_cloudformation_export(cf_client, export_name):
    """
    Page through CloudFormation exports looking for ``export_name``.

    :param cf_client: A boto3 CloudFormation client
    :param export_name: The export name

    :type export_name: str

    :returns: The export value, or ``None`` if there is no such export
    :rtype: str
    """
    kwargs = {}
    while True:
        try:
            result = cf_client.list_exports(**kwargs)
        except ClientError as err:
            raise ClientException(f'Unable to list CloudFormation exports: {err}') from err
        for item in result.get('Exports', []):
            if item.get('Name') == export_name:
                return item.get('Value')
        next_token = result.get('NextToken')
        if not next_token:
            return None
        kwargs = {'NextToken': next_token}


def get_account_id(sts_client):
    """
    :param sts_client: A boto3 STS client

    :returns: The account id of the caller
    :rtype: str
    """
    try:
        return str(sts_client.get_caller_identity()['Account'])
    except ClientError as err:
        raise ClientException(f'Unable to get the caller identity: {err}') from err


def role_arn(account_id, role_name, region=None):
    """
    :param account_id: The AWS account id
    :param role_name: The IAM role name
    :param region: The region, which decides the partition

    :returns: ``arn:<partition>:iam::<account_id>:role/<role_name>``
    :rtype: str
    """
    return f'arn:{aws_partition(region)}:iam::{account_id}:role/{role_name}'
