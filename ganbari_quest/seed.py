"""
Initial data for a fresh database.
Usage: python -m ganbari_quest.seed

Each table is seeded only while it is empty, so the script can be rerun.
"""
from sqlalchemy.orm import Session

from ganbari_quest.constants import (
    CATEGORY_PHYSICAL, CATEGORY_LEARNING, CATEGORY_DAILY_LIFE, CATEGORY_SOCIAL, CATEGORY_CREATIVE
)
from ganbari_quest.database import SessionLocal, init_db
from ganbari_quest.models import Activity, Child, MarketBenchmark, Status
from ganbari_quest.repositories.activity_repository import ActivityRepository
from ganbari_quest.repositories.child_repository import ChildRepository
from ganbari_quest.repositories.status_repository import BenchmarkRepository, StatusRepository

SEED_CHILD = {"nickname": "おじょうさま", "age": 4, "theme": "pink"}

# (name, category, icon, base_points, age_min, age_max)
SEED_ACTIVITIES = [
    ("たいそうした", CATEGORY_PHYSICAL, "🤸", 5, None, None),
    ("おそとであそんだ", CATEGORY_PHYSICAL, "🏃", 5, None, None),
    ("すいみんぐ", CATEGORY_PHYSICAL, "🏊", 10, 3, None),
    ("ひらがなれんしゅう", CATEGORY_LEARNING, "✏️", 5, 3, None),
    ("すうじをかぞえた", CATEGORY_LEARNING, "🔢", 5, 3, None),
    ("えほんをよんだ", CATEGORY_LEARNING, "📖", 5, None, None),
    ("しょっきをはこんだ", CATEGORY_DAILY_LIFE, "🍽️", 5, 3, None),
    ("おきがえした", CATEGORY_DAILY_LIFE, "👗", 3, 3, None),
    ("はみがきした", CATEGORY_DAILY_LIFE, "🪥", 3, None, None),
    ("ごはんをぜんぶたべた", CATEGORY_DAILY_LIFE, "🍚", 3, 1, 6),
    ("ともだちとあそんだ", CATEGORY_SOCIAL, "🤝", 5, 3, None),
    ("あいさつした", CATEGORY_SOCIAL, "👋", 3, None, None),
    ("はっぴょうかいでがんばった", CATEGORY_SOCIAL, "🎤", 20, 3, None),
    ("おえかきした", CATEGORY_CREATIVE, "🎨", 5, None, None),
    ("うたをうたった", CATEGORY_CREATIVE, "🎵", 5, None, None),
]

# Provisional age-4 benchmarks: category -> (mean, std_dev)
SEED_BENCHMARKS = {
    CATEGORY_PHYSICAL: (30.0, 10.0),
    CATEGORY_LEARNING: (20.0, 8.0),
    CATEGORY_DAILY_LIFE: (35.0, 8.0),
    CATEGORY_SOCIAL: (25.0, 10.0),
    CATEGORY_CREATIVE: (25.0, 9.0),
}
SEED_BENCHMARK_AGE = 4


def seed(db: Session) -> dict:
    """
    Insert seed rows into empty tables.

    Returns:
        Number of rows inserted per table
    """
    inserted = {"children": 0, "activities": 0, "market_benchmarks": 0, "statuses": 0}

    if db.query(Child).count() == 0:
        ChildRepository.create(db, Child(**SEED_CHILD))
        inserted["children"] = 1

    if db.query(Activity).count() == 0:
        for sort_order, (name, category, icon, points, age_min, age_max) in enumerate(SEED_ACTIVITIES, 1):
            ActivityRepository.create(db, Activity(
                name=name,
                category=category,
                icon=icon,
                base_points=points,
                age_min=age_min,
                age_max=age_max,
                sort_order=sort_order
            ))
        inserted["activities"] = len(SEED_ACTIVITIES)

    if db.query(MarketBenchmark).count() == 0:
        for category, (mean, std_dev) in SEED_BENCHMARKS.items():
            BenchmarkRepository.create(db, MarketBenchmark(
                age=SEED_BENCHMARK_AGE,
                category=category,
                mean=mean,
                std_dev=std_dev,
                source="暫定値"
            ))
        inserted["market_benchmarks"] = len(SEED_BENCHMARKS)

    if db.query(Status).count() == 0:
        # Start the first child at the market average
        child = ChildRepository.get_all(db)[0]
        for category, (mean, _) in SEED_BENCHMARKS.items():
            StatusRepository.create(db, Status(child_id=child.id, category=category, value=mean))
        inserted["statuses"] = len(SEED_BENCHMARKS)

    db.commit()
    return inserted


def main():
    init_db()
    db = SessionLocal()
    try:
        print("Seeding database...")
        for table, count in seed(db).items():
            if count:
                print(f"  ✓ {table}: {count} items")
            else:
                print(f"  - {table}: already seeded")
        print("Seeding complete!")
    finally:
        db.close()


if __name__ == "__main__":
    main()
