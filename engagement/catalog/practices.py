"""
Somatic practice catalog.

The catalog is static reference data. It is copied into the database by
an explicit, idempotent seeding step at startup rather than at import time.
"""

from typing import Optional

from loguru import logger

from engagement.core.models import PracticeCategory, PracticeItem
from engagement.storage.sqlite_store import SQLiteEngagementStore


PRACTICE_CATALOG: tuple[PracticeItem, ...] = (
    # Breathing
    PracticeItem(
        id="gentle-breathing",
        title="Gentle Breathing",
        description="Soft, natural breathing to calm the nervous system",
        category=PracticeCategory.BREATHING,
        duration="3-5 minutes",
        instructions=(
            "Place one hand on your chest, one on your belly. Breathe naturally. "
            "Notice which hand moves more. Gradually let your belly hand move more "
            "than your chest hand. No forcing, just gentle awareness."
        ),
    ),
    PracticeItem(
        id="extended-exhale",
        title="Extended Exhale",
        description="Lengthening the exhale to activate rest and digest",
        category=PracticeCategory.BREATHING,
        duration="5 minutes",
        instructions=(
            "Breathe in for a count of 4. Breathe out for a count of 6. Continue "
            "this rhythm. If it feels strained, adjust the counts. The exhale "
            "should be longer than the inhale."
        ),
    ),
    # Grounding
    PracticeItem(
        id="five-senses",
        title="Five Senses",
        description="Anchoring yourself in the present moment through your senses",
        category=PracticeCategory.GROUNDING,
        duration="3-5 minutes",
        instructions=(
            "Notice 5 things you can see, 4 things you can touch, 3 things you can "
            "hear, 2 things you can smell, and 1 thing you can taste. Take your "
            "time with each sense."
        ),
    ),
    PracticeItem(
        id="feet-on-the-floor",
        title="Feet on the Floor",
        description="Feeling the ground hold you up, one breath at a time",
        category=PracticeCategory.GROUNDING,
        duration="2-3 minutes",
        instructions=(
            "Sit or stand with both feet flat. Press them gently into the floor and "
            "release. Notice the weight of your body being held. With each exhale, "
            "let a little more of that weight sink down."
        ),
    ),
    # Movement
    PracticeItem(
        id="gentle-stretching",
        title="Gentle Stretching",
        description="Slow, mindful movements to release tension",
        category=PracticeCategory.MOVEMENT,
        duration="5-10 minutes",
        instructions=(
            "Move slowly and gently. Roll your shoulders. Tilt your head side to "
            "side. Stretch your arms overhead. Twist gently at the waist. Listen to "
            "your body and move only as feels comfortable."
        ),
    ),
    PracticeItem(
        id="walking-meditation",
        title="Walking Meditation",
        description="Bringing awareness to the simple act of walking",
        category=PracticeCategory.MOVEMENT,
        duration="10-15 minutes",
        instructions=(
            "Walk slowly. Notice the sensation of your feet touching the ground. "
            "Feel the movement of your legs. Notice your breath. If your mind "
            "wanders, gently return to the sensations of walking."
        ),
    ),
    # Body scan
    PracticeItem(
        id="body-scan",
        title="Body Scan",
        description="A gentle practice of noticing sensations throughout your body",
        category=PracticeCategory.BODY_SCAN,
        duration="5-10 minutes",
        instructions=(
            "Find a comfortable position. Starting at your feet, slowly bring "
            "awareness to each part of your body. Notice any sensations without "
            "judgment. Move upward through legs, torso, arms, and head."
        ),
    ),
    PracticeItem(
        id="progressive-relaxation",
        title="Progressive Relaxation",
        description="Tensing and releasing muscle groups to release stored tension",
        category=PracticeCategory.BODY_SCAN,
        duration="10-15 minutes",
        instructions=(
            "Starting with your feet, gently tense the muscles for 5 seconds, then "
            "release. Notice the difference. Move upward through your body: legs, "
            "belly, chest, arms, shoulders, face. Always be gentle with yourself."
        ),
    ),
    # Silly
    PracticeItem(
        id="shaking",
        title="Shaking",
        description="Letting the body shake out tension the way animals do",
        category=PracticeCategory.SILLY,
        duration="2-5 minutes",
        instructions=(
            "Stand with knees slightly bent. Begin to gently shake your hands and "
            "arms. Let the shaking spread naturally through your body. Let it move "
            "as it wants to."
        ),
    ),
    PracticeItem(
        id="silly-faces",
        title="Silly Faces",
        description="Scrunching and stretching your face to loosen held expressions",
        category=PracticeCategory.SILLY,
        duration="1-2 minutes",
        instructions=(
            "Scrunch your whole face as small as it will go and hold for a breath. "
            "Then open it wide: eyes, mouth, eyebrows up. Repeat a few times and "
            "notice how your jaw and forehead feel afterwards."
        ),
    ),
)

CATALOG_SIZE = len(PRACTICE_CATALOG)


_BY_ID = {item.id: item for item in PRACTICE_CATALOG}


def get_practice(item_id: str) -> Optional[PracticeItem]:
    """Look up a catalog item by slug"""
    return _BY_ID.get(item_id)


def practices_in(category: Optional[PracticeCategory] = None) -> list[PracticeItem]:
    """Catalog items, optionally restricted to one category"""
    if category is None:
        return list(PRACTICE_CATALOG)
    return [item for item in PRACTICE_CATALOG if item.category == category]


async def seed_practice_catalog(store: SQLiteEngagementStore) -> int:
    """
    Populate the practice table if it is empty.

    Safe to call on every startup: the emptiness check and the inserts run
    in one transaction, so a second call inserts nothing.

    Returns:
        Number of practices inserted
    """
    inserted = await store.seed_practices(PRACTICE_CATALOG)
    if inserted:
        logger.info(f"Seeded {inserted} practices into catalog")
    else:
        logger.debug("Practice catalog already seeded")
    return inserted
