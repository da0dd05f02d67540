#!/usr/bin/env python3
"""
Ручная проверка обратного геокодирования на запущенном сервере
"""
import sys

import requests


def check_inverse(base_url: str = "http://localhost:8080"):
    # Проверка health
    print("🔍 Проверяем health endpoint...")
    try:
        response = requests.get(f"{base_url}/health", timeout=5)
        print(f"Health: {response.status_code} - {response.json()}")
    except requests.RequestException as e:
        print(f"Ошибка health: {e}")

    print("\n🔍 Проверяем обратное геокодирование...")
    points = [
        (55.7539, 37.6208, "highways"),
        (55.7539, 37.6208, "all"),
        (55.7539, 37.6208, "places"),
        (59.9386, 30.3141, "objects"),
    ]

    for lat, lon, level in points:
        print(f"\n📍 Точка: {lat}, {lon} (уровень {level})")
        try:
            response = requests.get(
                f"{base_url}/location/latlon/{lat}/{lon}",
                params={"largest_level": level, "max_neighbours": 3, "detail": "short"},
                timeout=30
            )
            print(f"Статус: {response.status_code}")

            if response.status_code == 200:
                data = response.json()
                if data.get("id"):
                    print(f"  Объект: [{data.get('type')}] {data.get('name', 'N/A')} - {data.get('address', '')}")
                if data.get("text"):
                    print(f"  Адрес: {data['text']}")
                for i, n in enumerate(data.get("_neighbours", [])[:3], 1):
                    print(f"  {i}. сосед: {n.get('name', n.get('id'))}")
            else:
                print(f"Ошибка: {response.text}")

        except requests.RequestException as e:
            print(f"Ошибка запроса: {e}")


if __name__ == "__main__":
    check_inverse(*sys.argv[1:2])
