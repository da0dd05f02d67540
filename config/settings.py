"""
Конфигурация сервиса обратного геокодирования
"""
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Настройки приложения"""

    # Elasticsearch
    ES_URL: str = "http://localhost:9200"
    ES_API_KEY: Optional[str] = None
    ES_USER: Optional[str] = None
    ES_PASS: Optional[str] = None
    ES_INDEX: str = "gazetteer"
    ES_TIMEOUT: int = 60

    # Повторная отправка упавшего запроса к индексу (один раз, без задержки)
    RESEND_REQUEST_ON_FAIL: bool = True

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080
    API_DEBUG: bool = False
    WEB_ROOT: str = ""

    # Обратное геокодирование
    DEFAULT_MAX_NEIGHBOURS: int = 15
    MAX_NEIGHBOURS_LIMIT: int = 100
    MIN_ENCLOSING_QUERY_SIZE: int = 10
    NEIGHBOURS_RADIUS_M: int = 1000
    HIGHWAY_RADIUS_M: int = 25
    PLACE_RADIUS_M: int = 1000
    DEFAULT_LARGEST_LEVEL: str = "highways"
    DEFAULT_DETAIL: str = "full"
    REQUEST_TIMEOUT: float = 30.0

    # Импорт
    IMPORT_SKIP_TYPES: str = ""
    IMPORT_CHUNK_SIZE: int = 500

    # Логирование
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def import_skip_types(self) -> List[str]:
        """Типы объектов, которые не загружаются в индекс"""
        return [t for t in self.IMPORT_SKIP_TYPES.replace(";", ",").replace(" ", ",").split(",") if t]


# Глобальный экземпляр настроек
settings = Settings()


def get_elasticsearch_config():
    """Конфигурация для подключения к Elasticsearch"""
    config = {
        "hosts": [settings.ES_URL],
        "request_timeout": settings.ES_TIMEOUT
    }

    # API Key аутентификация (приоритет)
    if settings.ES_API_KEY:
        config["api_key"] = settings.ES_API_KEY
    # Basic Auth (альтернатива)
    elif settings.ES_USER and settings.ES_PASS:
        config["basic_auth"] = (settings.ES_USER, settings.ES_PASS)

    return config
