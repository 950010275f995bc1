"""Deploy Elasticsearch templates, indices, pipelines and snapshot repositories"""
from es_setup._version import __version__
from es_setup.exceptions import *
from es_setup.helpers.versioning import increment, strip_version
from es_setup.helpers.substitute import build_variables, replace_placeholders
from es_setup.client import SearchClient
from es_setup.actions import *
from es_setup.orchestrator import deploy, deploy_target
