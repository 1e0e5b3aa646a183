from __future__ import annotations

import logging
from datetime import datetime

from horder.domain.catalog import Product, Variant, utc_now
from horder.persistence.repositories import Repository

logger = logging.getLogger(__name__)

DEFAULT_CATALOG: list[dict] = [
    {
        "id": "youtube-premium",
        "name": "Youtube Premium",
        "source": "Family Share",
        "variants": [
            {"id": "yt-1m", "duration": "1 tháng", "import_price": 25000, "sell_price": 40000},
            {"id": "yt-6m", "duration": "6 tháng", "import_price": 140000, "sell_price": 220000},
            {"id": "yt-1y", "duration": "1 năm", "import_price": 250000, "sell_price": 390000},
        ],
    },
    {
        "id": "netflix-4k",
        "name": "Netflix 4K",
        "source": "Giftcode US",
        "variants": [
            {"id": "nf-1m", "duration": "1 tháng", "import_price": 60000, "sell_price": 85000},
        ],
    },
]


def seed_default_catalog(repo: Repository, now: datetime | None = None) -> dict:
    if repo.list_products():
        return {"seeded_now": False, "products": 0}

    now = now or utc_now()
    for raw in DEFAULT_CATALOG:
        repo.insert_product(
            Product(
                id=raw["id"],
                name=raw["name"],
                source=raw["source"],
                variants=[Variant(**v) for v in raw["variants"]],
                last_updated=now,
            )
        )
    logger.info("default catalog seeded: products=%d", len(DEFAULT_CATALOG))
    return {"seeded_now": True, "products": len(DEFAULT_CATALOG)}
