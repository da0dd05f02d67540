"""
Ошибки сервиса обратного геокодирования
"""


class GeocoderError(Exception):
    """Базовая ошибка геокодера"""


class InvalidInput(GeocoderError):
    """Некорректные входные данные (координаты отсутствуют или не разбираются)"""


class IndexUnavailable(GeocoderError):
    """Запрос к геоиндексу не выполнен (ошибка или таймаут)"""


class ResolutionCancelled(GeocoderError):
    """Запрос отменён (истёк таймаут), оставшиеся этапы не выполняются"""
