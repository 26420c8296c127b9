from analytics_dispatch.config.interface import ConfigResolver
from analytics_dispatch.config.resolvers import DictConfigResolver, EnvConfigResolver

__all__ = ["ConfigResolver", "DictConfigResolver", "EnvConfigResolver"]
