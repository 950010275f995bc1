"""Descriptor Classes"""

import logging
from pathlib import Path
import yaml
from es_client.exceptions import ConfigurationError as ClientConfigurationError
from es_client.exceptions import FailedValidation
from es_client.helpers.schemacheck import SchemaCheck
from es_client.helpers.utils import ensure_list, get_yaml
from es_setup.defaults.settings import DESCRIPTOR_SECTION
from es_setup.exceptions import ConfigurationError
from es_setup.validators import descriptor


def read_descriptor(path, env_vars=True):
    """
    Read the deployment descriptor at ``path``.

    :param path: Path to a YAML (or JSON) descriptor
    :param env_vars: Expand whole-value ``${VAR}`` and ``${VAR:default}`` scalars from
        the environment, as :py:func:`~.es_client.helpers.utils.get_yaml` does. This
        has to be off when placeholders use the ``${ }`` delimiters, or they would be
        read as environment variables.

    :type path: str
    :type env_vars: bool

    :rtype: dict
    """
    try:
        if env_vars:
            data = get_yaml(path)
        else:
            with open(path, 'r', encoding='utf-8') as fhandle:
                data = yaml.safe_load(fhandle)
    except (ClientConfigurationError, OSError, yaml.YAMLError) as err:
        raise ConfigurationError(f'Unable to read descriptor "{path}": {err}') from err
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f'Descriptor "{path}" is not a mapping')
    return data


class TargetDef:
    """One cluster to deploy to, from the ``custom.elasticsearch`` section"""

    def __init__(self, target, location='target'):
        self.loggit = logging.getLogger('es_setup.classdef.TargetDef')
        #: The validated target dictionary. Placeholder substitution writes through
        #: to the descriptor, so this is the descriptor's own object.
        self.target = target
        self.validate(location)
        #: Literal endpoint, or ``None``
        self.endpoint = target.get('endpoint')
        #: CloudFormation export holding the endpoint, or ``None``
        self.cf_endpoint = target.get('cf-endpoint')
        #: AWS profile for signing and AWS lookups, or ``None``
        self.aws_profile = target.get('aws-profile')
        #: Only deploy this target when deploying to this region
        self.only_on_region = target.get('onlyOnRegion')
        self.pipelines = target.get('pipelines') or []
        self.templates = target.get('templates') or []
        self.indices = target.get('indices') or []
        self.repositories = target.get('repositories') or []

    def validate(self, location):
        """Check the target and each of its entries against the descriptor schemas"""
        checks = [(self.target, descriptor.target(), location)]
        for key, schema in (
            ('pipelines', descriptor.artifact()),
            ('templates', descriptor.template()),
            ('indices', descriptor.artifact()),
            ('repositories', descriptor.repository()),
        ):
            for idx, item in enumerate(self.target.get(key) or []):
                checks.append((item, schema, f'{location}, {key}[{idx}]'))
        for data, schema, loc in checks:
            try:
                SchemaCheck(data, schema, 'descriptor', loc).result()
            except FailedValidation as err:
                self.loggit.critical('Configuration Error: %s', err)
                raise ConfigurationError(f'Invalid descriptor at {loc}: {err}') from err

    def skip_for_region(self, region):
        """
        :param region: The region being deployed to

        :returns: ``True`` if ``onlyOnRegion`` is set and is not ``region``
        :rtype: bool
        """
        return bool(self.only_on_region) and self.only_on_region != region


class Descriptor:
    """Deployment descriptor Class

    The ``custom.elasticsearch`` section may be a single target mapping or a list of
    them. Each becomes a :py:class:`~.es_setup.classdef.TargetDef`.
    """

    def __init__(self, data, base_dir=None):
        """
        :param data: The whole descriptor
        :param base_dir: Directory that artifact ``file`` paths are relative to

        :type data: dict
        :type base_dir: str
        """
        self.logger = logging.getLogger(__name__)
        #: The whole descriptor. Placeholders are replaced in this object in place.
        self.data = data
        #: Directory that artifact ``file`` paths are relative to
        self.base_dir = base_dir
        provider = data.get('provider') or {}
        try:
            SchemaCheck(provider, descriptor.provider(), 'descriptor', 'provider').result()
        except FailedValidation as err:
            raise ConfigurationError(f'Invalid descriptor at provider: {err}') from err
        #: The ``provider.region`` value, if any
        self.region = provider.get('region')
        #: The ``provider.profile`` value, if any
        self.profile = provider.get('profile')
        #: A list of :py:class:`~.es_setup.classdef.TargetDef`
        self.targets = [
            TargetDef(target, location=f'target {idx}')
            for idx, target in enumerate(self.section())
        ]
        self.logger.debug('Descriptor has %d target(s)', len(self.targets))

    @classmethod
    def from_file(cls, path, env_vars=True):
        """
        Read and validate the descriptor at ``path``. Artifact paths are resolved
        against the descriptor's directory.

        :rtype: :py:class:`~.es_setup.classdef.Descriptor`
        """
        return cls(
            read_descriptor(path, env_vars=env_vars),
            base_dir=str(Path(path).resolve().parent),
        )

    def section(self):
        """
        :returns: The target mappings of the ``custom.elasticsearch`` section, or an
            empty list if there is no such section
        :rtype: list
        """
        node = self.data
        for key in DESCRIPTOR_SECTION:
            if not isinstance(node, dict) or node.get(key) is None:
                return []
            node = node[key]
        targets = ensure_list(node)
        for target in targets:
            if not isinstance(target, dict):
                raise ConfigurationError(
                    f'Each {".".join(DESCRIPTOR_SECTION)} entry must be a mapping'
                )
        return targets
