"""Use __init__ to make these not need to be nested under lowercase.Capital"""
from es_setup.actions.alias_swap import AliasSwap
from es_setup.actions.indices import SetupIndices
from es_setup.actions.pipelines import SetupPipelines
from es_setup.actions.repositories import SetupRepositories
from es_setup.actions.templates import SetupTemplates
