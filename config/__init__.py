from .settings import settings, Settings, get_elasticsearch_config

__all__ = ["settings", "Settings", "get_elasticsearch_config"]
