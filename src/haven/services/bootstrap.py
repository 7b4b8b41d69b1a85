"""
Bootstrap Data

Idempotent seeding of starter prompts and resources. Each table is
populated only when it is empty, so running this on every startup
is safe.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from haven.config.logging_config import get_logger
from haven.infrastructure.database.models import PromptModel, ResourceModel
from haven.infrastructure.database.repositories import PromptRepository, ResourceRepository

logger = get_logger(__name__)

STARTER_PROMPTS: tuple[str, ...] = (
    "What are three things you're grateful for today?",
    "Describe a challenging situation this week and how you handled it.",
    "What emotions have you noticed recurring lately?",
    "Write about a moment this week when you felt at peace.",
)

STARTER_RESOURCES: tuple[dict[str, str], ...] = (
    {
        "title": "Breathing Exercises",
        "content": (
            "Try the 4-7-8 technique: Breathe in for 4 seconds, hold for 7 seconds, "
            "exhale for 8 seconds. Repeat 3-4 times when feeling anxious."
        ),
        "category": "relaxation",
    },
    {
        "title": "Grounding Techniques",
        "content": (
            "The 5-4-3-2-1 method: Notice 5 things you can see, 4 things you can touch, "
            "3 things you can hear, 2 things you can smell, and 1 thing you can taste."
        ),
        "category": "anxiety",
    },
    {
        "title": "Sleep Hygiene Tips",
        "content": (
            "1. Keep a consistent sleep schedule\n"
            "2. Create a relaxing bedtime routine\n"
            "3. Avoid screens 1 hour before bed\n"
            "4. Keep your room cool and dark"
        ),
        "category": "wellness",
    },
    {
        "title": "Mindfulness Basics",
        "content": (
            "Start with just 5 minutes of daily meditation. Focus on your breath and gently "
            "redirect your attention when your mind wanders. There's no wrong way to do it!"
        ),
        "category": "mindfulness",
    },
)


async def seed_database(session: AsyncSession) -> dict[str, int]:
    """
    Insert starter content into empty tables.

    Args:
        session: Open database session (caller commits)

    Returns:
        Number of rows inserted per table
    """
    prompts = PromptRepository(session)
    resources = ResourceRepository(session)
    inserted = {"prompts": 0, "resources": 0}

    if await prompts.count() == 0:
        created = await prompts.bulk_create(
            [PromptModel(content=text, is_active=True) for text in STARTER_PROMPTS]
        )
        inserted["prompts"] = len(created)

    if await resources.count() == 0:
        created = await resources.bulk_create(
            [ResourceModel(**fields) for fields in STARTER_RESOURCES]
        )
        inserted["resources"] = len(created)

    logger.info("Database seeded", **inserted)
    return inserted
