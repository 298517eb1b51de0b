import asyncio
import logging
import os
import sys
from datetime import datetime, timedelta, timezone
from dotenv import load_dotenv

# --- settings ---
# Load backend/.env relative to this script
current_dir = os.path.dirname(os.path.abspath(__file__))
backend_dir = os.path.dirname(current_dir)
sys.path.append(backend_dir)

dotenv_path = os.path.join(backend_dir, '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path=dotenv_path)
else:
    print(f"Warning: .env file not found at {dotenv_path}")

from artifact_search.db.mongo import get_artifact_collection, close_mongo_client
from artifact_search.db.session import AsyncSessionLocal, init_db, cleanup_db_connections
from artifact_search.models.models import ReviewRecord, Rating, ReviewStatus
from artifact_search.utils.ids import new_artifact_id

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("seed_catalogue")

ARTIFACTS_DATA = [
    {
        "title": "Bronze Ritual Wine Vessel",
        "description": "Cast bronze vessel with taotie masks used in ancestral rites.",
        "category": "Vessels",
        "culture": "Chinese",
        "department": "Asian Art",
        "period": "Shang dynasty",
        "medium": "Bronze",
        "artist_name": "",
        "tags": ["ritual", "bronze", "wine"],
        "exact_found_date": datetime(1928, 10, 7),
        "location": {"placename": "Yinxu", "city": "Anyang", "region": "Henan", "country": "China",
                     "continent": "Asia", "latitude": 36.12, "longitude": 114.31},
        # ratings per visitor, review status history oldest first
        "_ratings": [5, 4],
        "_statuses": [ReviewStatus.ACCEPTED],
    },
    {
        "title": "Bronze Mirror with Lotus Pattern",
        "description": "Polished bronze mirror, the reverse decorated with lotus scrolls.",
        "category": "Mirrors",
        "culture": "Korean",
        "department": "Asian Art",
        "period": "Goryeo",
        "medium": "Bronze",
        "artist_name": "",
        "tags": ["mirror", "lotus"],
        "exact_found_date": datetime(1974, 5, 2),
        "location": {"placename": "Gaeseong", "city": "Kaesong", "country": "North Korea",
                     "continent": "Asia", "latitude": 37.97, "longitude": 126.55},
        "_ratings": [3],
        "_statuses": [],
    },
    {
        "title": "Red-Figure Amphora",
        "description": "Storage jar painted with athletes in the red-figure technique.",
        "category": "Vessels",
        "culture": "Greek",
        "department": "Greek and Roman Art",
        "period": "Classical",
        "medium": "Terracotta",
        "artist_name": "Berlin Painter",
        "tags": ["amphora", "athletics"],
        "exact_found_date": datetime(1891, 3, 14),
        "location": {"placename": "Vulci", "city": "Montalto di Castro", "country": "Italy",
                     "continent": "Europe", "latitude": 42.42, "longitude": 11.63},
        "_ratings": [2, 2],
        "_statuses": [ReviewStatus.PENDING, ReviewStatus.ACCEPTED],
    },
    {
        "title": "Celadon Maebyeong",
        "description": "Inlaid celadon prunus vase with cranes and clouds.",
        "category": "Ceramics",
        "culture": "Korean",
        "department": "Asian Art",
        "period": "Goryeo",
        "medium": "Stoneware",
        "artist_name": "",
        "tags": ["celadon", "crane"],
        "exact_found_date": None,
        "location": {"city": "Gangjin", "country": "South Korea", "continent": "Asia"},
        "_ratings": [],
        "_statuses": [ReviewStatus.PENDING],
    },
    {
        "title": "Flint Hand Axe",
        "description": "Bifacially worked hand axe from river gravels.",
        "category": "Tools",
        "culture": "Acheulean",
        "department": "Prehistory",
        "period": "Lower Palaeolithic",
        "medium": "Flint",
        "artist_name": "",
        "tags": ["stone tool"],
        "exact_found_date": datetime(1797, 6, 22),
        "location": {"placename": "Hoxne", "river": "Goldbrook", "country": "United Kingdom",
                     "continent": "Europe", "latitude": 52.35, "longitude": 1.2},
        "_ratings": [4],
        "_statuses": [ReviewStatus.ACCEPTED, ReviewStatus.REJECTED],
    },
]


def seed_artifacts() -> list:
    """Insert artifact documents; returns (id, ratings, statuses) per artifact"""
    collection = get_artifact_collection()
    seeded = []
    documents = []
    now = datetime.now(timezone.utc).replace(tzinfo=None)

    for data in ARTIFACTS_DATA:
        document = {k: v for k, v in data.items() if not k.startswith("_")}
        document["_id"] = new_artifact_id()
        document["uploaded_by"] = "seed"
        document["uploaded_at"] = now
        document["updated_at"] = now
        documents.append(document)
        seeded.append((document["_id"], data["_ratings"], data["_statuses"]))

    collection.insert_many(documents)
    logger.info(f"Inserted {len(documents)} artifact documents")
    return seeded


async def seed_reviews(seeded: list):
    await init_db()

    base_time = datetime.now(timezone.utc) - timedelta(days=30)
    async with AsyncSessionLocal() as session:
        for index, (artifact_id, ratings, statuses) in enumerate(seeded):
            records = [
                ReviewRecord(
                    artifact_id=artifact_id,
                    user_id=1,
                    status=status.value,
                    saved_at=base_time + timedelta(days=index, hours=step)
                )
                for step, status in enumerate(statuses)
            ]
            if ratings and not records:
                # ratings hang off a review record; give unreviewed artifacts an accepted one
                records.append(ReviewRecord(
                    artifact_id=artifact_id,
                    user_id=1,
                    status=ReviewStatus.ACCEPTED.value,
                    saved_at=base_time + timedelta(days=index)
                ))
            session.add_all(records)
            await session.flush()

            for visitor, value in enumerate(ratings, start=100):
                session.add(Rating(user_id=visitor, review_id=records[-1].id, rating_value=value))

        await session.commit()
    logger.info(f"Seeded review records and ratings for {len(seeded)} artifacts")


async def main():
    try:
        seeded = await asyncio.to_thread(seed_artifacts)
        await seed_reviews(seeded)
    finally:
        await cleanup_db_connections()
        close_mongo_client()


if __name__ == "__main__":
    asyncio.run(main())
