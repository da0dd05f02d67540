"""
ETL скрипт для загрузки объектов геоиндекса из дампа в Elasticsearch
"""
import argparse
import gzip
import json
import logging
import time
from typing import Any, Dict, Iterator, List, Optional

from elasticsearch import Elasticsearch
from elasticsearch.helpers import bulk
from tqdm import tqdm
from unidecode import unidecode

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from config import settings, get_elasticsearch_config
from api.housenumbers import fuzzy_housenumber_index

logger = logging.getLogger(__name__)


# Маппинг индекса
INDEX_MAPPING = {
    "mappings": {
        "properties": {
            "id": {"type": "keyword"},
            "type": {"type": "keyword"},
            "addr_level": {"type": "keyword"},
            "name": {
                "type": "text",
                "analyzer": "standard",
                "fields": {
                    "keyword": {"type": "keyword"}
                }
            },
            "name_trans": {"type": "text", "analyzer": "standard"},
            "center_point": {"type": "geo_point"},
            "full_geometry": {"type": "geo_shape"},
            "admin0_name": {"type": "text"},
            "admin1_name": {"type": "text"},
            "admin2_name": {"type": "text"},
            "local_admin_name": {"type": "text"},
            "locality_name": {"type": "text"},
            "neighborhood_name": {"type": "text"},
            "street_name": {"type": "text"},
            "housenumber": {"type": "keyword"},
            "housenumber_variants": {"type": "keyword"},
            "poi_class": {"type": "keyword"}
        }
    },
    "settings": {
        "number_of_shards": 1,
        "number_of_replicas": 0,
        "refresh_interval": "30s"
    }
}


def build_document(feature: Dict[str, Any], index_name: str) -> Optional[Dict[str, Any]]:
    """Объект из дампа -> действие bulk загрузки"""
    feature_id = feature.get("id")
    if not feature_id:
        return None

    source = dict(feature)

    # Варианты написания номера дома для нечёткого поиска
    housenumber = source.get("housenumber")
    if housenumber is not None and housenumber != "":
        housenumber = str(housenumber)
        source["housenumber"] = housenumber
        source["housenumber_variants"] = sorted(fuzzy_housenumber_index(housenumber))

    # Транслитерация названия
    name = source.get("name")
    if name:
        source["name_trans"] = unidecode(name)

    return {
        "_index": index_name,
        "_id": feature_id,
        "_source": source
    }


class LocationsETL:
    """ETL процесс для загрузки объектов геоиндекса"""

    def __init__(
        self,
        dump_path: str,
        es: Optional[Elasticsearch] = None,
        index_name: Optional[str] = None,
        recreate_index: bool = False,
        skip_types: Optional[List[str]] = None
    ):
        self.es = es or Elasticsearch(**get_elasticsearch_config())
        self.dump_path = dump_path
        self.index = index_name or settings.ES_INDEX
        self.recreate_index = recreate_index
        self.skip_types = set(skip_types if skip_types is not None else settings.import_skip_types())

    def create_index(self) -> bool:
        """Создание индекса в Elasticsearch"""
        try:
            # Удаляем индекс если существует и требуется пересоздать
            if self.recreate_index and self.es.indices.exists(index=self.index):
                logger.info(f"Удаляем существующий индекс {self.index}")
                self.es.indices.delete(index=self.index)

            # Создаем индекс, если он отсутствует
            if not self.es.indices.exists(index=self.index):
                self.es.indices.create(
                    index=self.index,
                    mappings=INDEX_MAPPING["mappings"],
                    settings=INDEX_MAPPING["settings"]
                )
                logger.info(f"Индекс {self.index} создан успешно")
            return True

        except Exception as e:
            logger.error(f"Ошибка создания индекса: {e}")
            return False

    def _open_dump(self):
        if self.dump_path.endswith(".gz"):
            return gzip.open(self.dump_path, "rt", encoding="utf-8")
        return open(self.dump_path, "r", encoding="utf-8")

    def read_features(self) -> Iterator[Dict[str, Any]]:
        """Объекты из дампа, по одному JSON на строку"""
        with self._open_dump() as f:
            for line_no, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    feature = json.loads(line)
                except json.JSONDecodeError as e:
                    logger.warning(f"Строка {line_no}: некорректный JSON, пропускаем ({e})")
                    continue
                if feature.get("type") in self.skip_types:
                    continue
                yield feature

    def get_documents(self) -> Iterator[Dict[str, Any]]:
        for feature in self.read_features():
            doc = build_document(feature, self.index)
            if doc is None:
                logger.warning(f"Объект без id пропущен: {str(feature)[:200]}")
                continue
            yield doc

    def load_data(self) -> bool:
        """Загрузка данных в Elasticsearch"""
        try:
            logger.info(f"Начинаем загрузку данных из {self.dump_path}...")

            success_count, failed = bulk(
                self.es.options(request_timeout=60),
                tqdm(self.get_documents(), desc="Загрузка", unit=" док"),
                chunk_size=settings.IMPORT_CHUNK_SIZE,
                max_retries=3,
                initial_backoff=2,
                max_backoff=600,
                raise_on_error=False
            )

            logger.info(f"Загружено документов: {success_count}")
            if failed:
                logger.warning(f"Ошибок при загрузке: {len(failed)}")

            # Обновляем индекс
            self.es.indices.refresh(index=self.index)

            return True

        except Exception as e:
            logger.error(f"Ошибка загрузки данных: {e}")
            return False

    def run_etl(self) -> bool:
        """Запуск полного ETL процесса"""
        logger.info("Запуск ETL процесса")

        start_time = time.time()

        # Проверяем подключение к Elasticsearch
        if not self.es.ping():
            logger.error("Не удалось подключиться к Elasticsearch")
            return False

        # Создаем индекс (при необходимости)
        if not self.create_index():
            return False

        # Загружаем данные
        if not self.load_data():
            return False

        count = self.es.count(index=self.index)["count"]

        elapsed_time = time.time() - start_time
        logger.info(f"ETL завершен успешно за {elapsed_time:.2f} секунд")
        logger.info(f"Документов в индексе: {count}")

        return True


def main():
    parser = argparse.ArgumentParser(description="Загрузка дампа объектов в геоиндекс")
    parser.add_argument("dump", help="Файл дампа: JSON на строку, можно .gz")
    parser.add_argument("--index", default=settings.ES_INDEX, help="Имя индекса")
    parser.add_argument("--recreate", action="store_true", help="Пересоздать индекс")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL))

    etl = LocationsETL(args.dump, index_name=args.index, recreate_index=args.recreate)
    success = etl.run_etl()

    if success:
        print("✅ ETL процесс завершен успешно")
    else:
        print("❌ ETL процесс завершился с ошибкой")
        sys.exit(1)


if __name__ == "__main__":
    main()
