"""Resolver 包测试 fixtures"""

from typing import Any

import pytest


@pytest.fixture
def collection_document() -> dict[str, Any]:
    """IPFS 上的采集元数据样例"""
    return {
        "type": "collection",
        "batchId": "HERB-1700000000000-42",
        "herbSpecies": "Ashwagandha",
        "collector": "Ravi Kumar",
        "weight": 25.0,
        "harvestDate": "2024-01-15",
        "location": {"latitude": "10.8505", "longitude": "76.2711", "zone": "Kerala"},
        "qualityGrade": "A",
    }


@pytest.fixture
def profiles_payload() -> list[dict[str, str]]:
    """参与者目录 JSON 样例"""
    return [
        {
            "address": "0xAbC0000000000000000000000000000000000001",
            "name": "Ravi Kumar",
            "organization": "Kerala Herb Collective",
            "role": "collector",
        },
        {
            "address": "0xdef0000000000000000000000000000000000002",
            "name": "Dr. Meera",
            "organization": "AyurLab",
            "role": "tester",
        },
    ]
