# seed script: loads the coping strategy catalogue and creates indexes
# run once: python -m app.seed

import asyncio
import logging
from datetime import datetime, timezone

from app.services.db import db

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


STRATEGIES = [
    {
        "title": "Body Scan Meditation",
        "description": "Slowly move your attention through the body to notice and release tension.",
        "type": "mindfulness",
        "steps": [
            "Sit or lie down comfortably and close your eyes",
            "Bring attention to your toes and notice any sensations",
            "Move your attention slowly up through each part of your body",
            "Breathe into any areas of tension and let them soften",
        ],
        "duration": 10,
    },
    {
        "title": "Mindful Observation",
        "description": "Pick one object and observe it with full attention for a few minutes.",
        "type": "mindfulness",
        "steps": [
            "Choose an object near you",
            "Notice its colour, shape and texture",
            "When your mind wanders, gently return to the object",
        ],
        "duration": 5,
    },
    {
        "title": "Thought Record",
        "description": "Write down an upsetting thought and look for evidence for and against it.",
        "type": "cbt",
        "steps": [
            "Describe the situation that upset you",
            "Write down the automatic thought you had",
            "List evidence that supports and contradicts the thought",
            "Write a more balanced alternative thought",
        ],
        "duration": 15,
    },
    {
        "title": "Behavioral Activation",
        "description": "Schedule one small, rewarding activity to lift your mood.",
        "type": "cbt",
        "steps": [
            "List a few activities you used to enjoy",
            "Pick one that takes less than 20 minutes",
            "Schedule it for a specific time today",
            "Notice how you feel afterwards",
        ],
        "duration": 20,
    },
    {
        "title": "Three Good Things",
        "description": "Write down three things that went well today and why they happened.",
        "type": "gratitude",
        "steps": [
            "Reflect on your day",
            "Write down three things that went well",
            "For each one, note why it happened",
        ],
        "duration": 5,
    },
    {
        "title": "Gratitude Letter",
        "description": "Write a short letter thanking someone who made a difference for you.",
        "type": "gratitude",
        "steps": [
            "Think of someone you are grateful to",
            "Write what they did and how it affected you",
            "Decide whether to send or keep the letter",
        ],
        "duration": 15,
    },
    {
        "title": "Box Breathing",
        "description": "Breathe in a steady four-count rhythm to calm the nervous system.",
        "type": "breathing",
        "steps": [
            "Inhale through your nose for 4 seconds",
            "Hold your breath for 4 seconds",
            "Exhale slowly for 4 seconds",
            "Hold for 4 seconds and repeat",
        ],
        "duration": 5,
    },
    {
        "title": "4-7-8 Breathing",
        "description": "A slow breathing pattern that helps with anxiety and falling asleep.",
        "type": "breathing",
        "steps": [
            "Exhale completely through your mouth",
            "Inhale quietly through your nose for 4 seconds",
            "Hold your breath for 7 seconds",
            "Exhale through your mouth for 8 seconds",
        ],
        "duration": 3,
    },
    {
        "title": "5-4-3-2-1 Grounding",
        "description": "Use your senses to bring yourself back to the present moment.",
        "type": "grounding",
        "steps": [
            "Name 5 things you can see",
            "Name 4 things you can touch",
            "Name 3 things you can hear",
            "Name 2 things you can smell",
            "Name 1 thing you can taste",
        ],
        "duration": 5,
    },
    {
        "title": "Cold Water Reset",
        "description": "Use a cold sensation to interrupt overwhelming emotions.",
        "type": "grounding",
        "steps": [
            "Run cold water over your hands or splash your face",
            "Focus on the temperature and sensation",
            "Take slow breaths until you feel steadier",
        ],
        "duration": 2,
    },
]


async def seed():
    """insert catalogue strategies that don't exist yet, then create indexes"""
    await db.connect()

    created = 0
    for strategy in STRATEGIES:
        existing = await db.coping_strategies.find_one({"title": strategy["title"]})
        if existing:
            logger.info(f"Strategy already exists: {strategy['title']}")
            continue

        doc = {
            **strategy,
            "rating": 0,
            "rating_count": 0,
            "personalized": False,
            "created_at": datetime.now(timezone.utc),
        }
        await db.coping_strategies.insert_one(doc)
        created += 1
        logger.info(f"Created strategy: {strategy['title']} ({strategy['type']})")

    logger.info(f"Seeded coping strategies ({created} new, {len(STRATEGIES) - created} already existed)")

    await db.ensure_indexes()

    logger.info("Seed complete!")
    await db.close()


if __name__ == "__main__":
    asyncio.run(seed())
