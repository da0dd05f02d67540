"""
FastAPI приложение обратного геокодирования
"""
import asyncio
import logging
from typing import Any, Dict, Optional

from elasticsearch import Elasticsearch
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings, get_elasticsearch_config
from .errors import IndexUnavailable, InvalidInput
from .geocoder import GeoResolver
from .index import ElasticsearchGeoIndex
from .params import build_request

# Настройка логирования
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL))
logger = logging.getLogger(__name__)

# Создание FastAPI приложения
app = FastAPI(
    title="Обратное геокодирование",
    description="Адрес, объект или границы по координатам точки",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Глобальные переменные для сервисов
es_client = None
geo_resolver = None

ROOT = settings.WEB_ROOT.rstrip("/")


@app.on_event("startup")
async def startup_event():
    """Инициализация при запуске"""
    global es_client, geo_resolver

    try:
        es_client = Elasticsearch(**get_elasticsearch_config())

        if not es_client.ping():
            raise ConnectionError("Не удалось подключиться к Elasticsearch")

        index = ElasticsearchGeoIndex(
            es_client,
            settings.ES_INDEX,
            resend_on_fail=settings.RESEND_REQUEST_ON_FAIL
        )
        geo_resolver = GeoResolver(index)

        logger.info(f"API успешно инициализировано, индекс {settings.ES_INDEX}")

    except Exception as e:
        logger.error(f"Ошибка инициализации: {e}")
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Очистка при завершении"""
    if es_client:
        es_client.close()


def get_resolver() -> GeoResolver:
    if not geo_resolver:
        raise HTTPException(status_code=503, detail="Сервис геокодирования не инициализирован")
    return geo_resolver


@app.get("/", response_model=dict)
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "Обратное геокодирование API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Проверка здоровья сервиса"""
    status = {
        "status": "healthy",
        "elasticsearch": "unknown",
        "index": settings.ES_INDEX
    }
    if es_client:
        try:
            status["elasticsearch"] = "connected" if es_client.ping() else "disconnected"
        except Exception as e:
            logger.warning(f"Elasticsearch не отвечает: {e}")
            status["elasticsearch"] = "disconnected"
    return status


async def _inverse(
    resolver: GeoResolver,
    lat: Optional[str],
    lon: Optional[str],
    related: Optional[str],
    max_neighbours: Optional[str],
    largest_level: Optional[str],
    full_geometry: Optional[str],
    detail: Optional[str],
    with_related: bool = False
) -> Dict[str, Any]:
    try:
        request = build_request(
            lat=lat,
            lon=lon,
            related=related,
            max_neighbours=max_neighbours,
            largest_level=largest_level,
            full_geometry=full_geometry,
            detail=detail,
            with_related=with_related
        )
        return await resolver.inverse(request)

    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IndexUnavailable as e:
        logger.error(f"Геоиндекс недоступен: {e}")
        raise HTTPException(status_code=503, detail="Геоиндекс недоступен")
    except asyncio.TimeoutError:
        logger.error(f"Таймаут обратного геокодирования для точки lat={lat}, lon={lon}")
        raise HTTPException(status_code=504, detail="Таймаут выполнения запроса")


@app.get(ROOT + "/location/latlon")
@app.get(ROOT + "/_inverse")
async def inverse_geocode(
    lat: Optional[str] = Query(None, description="Широта"),
    lon: Optional[str] = Query(None, description="Долгота"),
    related: Optional[str] = Query(None, description="Вернуть связанные объекты"),
    max_neighbours: Optional[str] = Query(None, description="Количество соседних объектов, 0..100, по умолчанию 15"),
    largest_level: Optional[str] = Query(None, description="objects, highways, all или places"),
    full_geometry: Optional[str] = Query(None, description="Возвращать полную геометрию"),
    detail: Optional[str] = Query(None, description="full или short"),
    resolver: GeoResolver = Depends(get_resolver)
):
    """Объект, улица или границы по координатам (параметры в строке запроса)"""
    return await _inverse(resolver, lat, lon, related, max_neighbours, largest_level, full_geometry, detail)


@app.get(ROOT + "/location/latlon/{lat}/{lon}")
async def inverse_geocode_path(
    lat: str,
    lon: str,
    related: Optional[str] = Query(None, description="Вернуть связанные объекты"),
    max_neighbours: Optional[str] = Query(None, description="Количество соседних объектов, 0..100, по умолчанию 15"),
    largest_level: Optional[str] = Query(None, description="objects, highways, all или places"),
    full_geometry: Optional[str] = Query(None, description="Возвращать полную геометрию"),
    detail: Optional[str] = Query(None, description="full или short"),
    resolver: GeoResolver = Depends(get_resolver)
):
    """Объект, улица или границы по координатам"""
    return await _inverse(resolver, lat, lon, related, max_neighbours, largest_level, full_geometry, detail)


@app.get(ROOT + "/location/latlon/{lat}/{lon}/_related")
async def inverse_geocode_related(
    lat: str,
    lon: str,
    max_neighbours: Optional[str] = Query(None, description="Количество соседних объектов, 0..100, по умолчанию 15"),
    largest_level: Optional[str] = Query(None, description="objects, highways, all или places"),
    full_geometry: Optional[str] = Query(None, description="Возвращать полную геометрию"),
    detail: Optional[str] = Query(None, description="full или short"),
    resolver: GeoResolver = Depends(get_resolver)
):
    """То же, со связанными объектами найденного объекта"""
    return await _inverse(
        resolver, lat, lon, None, max_neighbours, largest_level, full_geometry, detail, with_related=True
    )


# Обработчик глобальных ошибок
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Необработанная ошибка: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Внутренняя ошибка сервера"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_DEBUG
    )
