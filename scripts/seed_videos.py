"""
Demo Video Seeding Script

Creates a demo interactive video with one element of each kind for local
development and manual testing of the player export.
"""
import asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from interactive_video.models.persisted_video import Base, VideoRecord


DEMO_VIDEO_ID = "demo_video"

SEED_ELEMENTS = [
    {
        "id": "intro-poll",
        "type": "poll",
        "title": "How familiar are you with the topic?",
        "timestamp": 5,
        "duration": 10,
        "options": [{"text": "New to it"}, {"text": "Some experience"}, {"text": "Expert"}],
    },
    {
        "id": "q1",
        "type": "quiz",
        "title": "Which window is active at t=35?",
        "timestamp": 30,
        "duration": 10,
        "options": [
            {"text": "[30, 40)", "isCorrect": True},
            {"text": "[20, 30)", "isCorrect": False},
        ],
        "feedback": {"correct": "Right, windows are half-open.", "incorrect": "Not quite."},
    },
    {
        "id": "hotspot-1",
        "type": "hotspot",
        "title": "Click the highlighted area",
        "timestamp": 45,
        "duration": 8,
        "position": {"x": 70, "y": 30},
        "pauseVideo": False,
    },
    {
        "id": "branch",
        "type": "decision",
        "title": "Where to next?",
        "timestamp": 60,
        "duration": 15,
        "options": [
            {"text": "Replay the quiz", "action": "jump:30"},
            {"text": "Skip ahead", "action": "jump:90"},
        ],
    },
]


async def seed_videos():
    """Seed the database with the demo video."""
    from interactive_video.db.config import DATABASE_URL

    engine = create_async_engine(DATABASE_URL)
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        result = await session.execute(
            select(VideoRecord).where(VideoRecord.video_id == DEMO_VIDEO_ID)
        )
        if result.scalar_one_or_none():
            print(f"Demo video already exists ({DEMO_VIDEO_ID})")
            return

        session.add(VideoRecord(
            video_id=DEMO_VIDEO_ID,
            title="Demo Interactive Video",
            url="https://example.com/media/demo.mp4",
            duration=120.0,
            description="One element of each kind",
            json_data={"elements": SEED_ELEMENTS, "settings": {}},
            status="draft",
        ))
        await session.commit()
        print(f"Successfully seeded demo video with {len(SEED_ELEMENTS)} elements")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_videos())
