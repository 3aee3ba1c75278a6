"""Demo data: one user, five habits with believable history, a week of moods.

Completion histories are generated so the streak engine itself arrives at the
intended streak / best / count figures; aggregates are never written by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Optional

from sqlmodel import Session, select

from ..config import BaseConfig
from ..dates import Clock, local_today, resolve_zone
from ..logging_config import get_logger
from ..models import Habit, HabitCompletion, MoodEntry, User
from .habits import HabitService
from .moods import MoodService
from .users import create_user

logger = get_logger("services.seed")

SessionFactory = Callable[[], Session]

DEMO_EMAIL = "test@example.com"
DEMO_PASSWORD = "password123"
DEMO_NAME = "Test User"

# streak / best / count are the figures the generated history must reproduce.
# today: True/False records today's state explicitly, None leaves today open.
HABIT_SPECS = [
    {
        "name": "Morning Exercise",
        "description": "30 minutes of cardio or yoga",
        "icon": "🏃",
        "target": "30 min",
        "category": "fitness",
        "streak": 5,
        "best": 10,
        "count": 15,
        "today": True,
        "note": "Morning jog completed",
    },
    {
        "name": "Drink Water",
        "description": "Stay hydrated throughout the day",
        "icon": "💧",
        "target": "8 glasses",
        "category": "health",
        "streak": 12,
        "best": 15,
        "count": 30,
        "today": True,
        "note": "Drank all 8 glasses",
    },
    {
        "name": "Meditation",
        "description": "Morning mindfulness practice",
        "icon": "🧘",
        "target": "15 min",
        "category": "mindfulness",
        "streak": 3,
        "best": 7,
        "count": 10,
        "today": False,
    },
    {
        "name": "Reading",
        "description": "Read books or articles",
        "icon": "📚",
        "target": "20 pages",
        "category": "productivity",
        "streak": 0,
        "best": 5,
        "count": 8,
        "today": None,
    },
    {
        "name": "Healthy Eating",
        "description": "Eat nutritious meals",
        "icon": "🥗",
        "target": "3 meals",
        "category": "health",
        "streak": 7,
        "best": 7,
        "count": 20,
        "today": None,
    },
]

# (days ago, score, note)
MOOD_SPECS = [
    (6, 7, "Good day"),
    (5, 8, "Great day"),
    (4, 6, "Average day"),
    (3, 9, "Excellent day!"),
    (2, 7, "Productive"),
    (1, 8, "Feeling good"),
    (0, 8, "Great start to the day"),
]


@dataclass(frozen=True)
class SeedSummary:
    """Aggregate counts returned after demo seeding."""

    users: int
    habits: int
    completions: int
    mood_entries: int


def completion_days(
    today: date, *, streak: int, best: int, count: int, completed_today: bool
) -> list[date]:
    """Completed days (ascending) whose streak/best/count match the arguments.

    Layout, walking back from today: the current run, a gap, a separate record
    run when ``best`` exceeds ``streak``, then isolated days separated by gaps.
    """

    extra = count - streak - (best if best > streak else 0)
    if extra < 0 or best < streak:
        raise ValueError(f"Inconsistent targets: streak={streak} best={best} count={count}")

    days: list[date] = []
    cursor = today if completed_today else today - timedelta(days=1)
    for _ in range(streak):
        days.append(cursor)
        cursor -= timedelta(days=1)
    cursor -= timedelta(days=1)
    if streak == 0:
        # neither today nor yesterday may be completed
        cursor = min(cursor, today - timedelta(days=2))

    if best > streak:
        for _ in range(best):
            days.append(cursor)
            cursor -= timedelta(days=1)
        cursor -= timedelta(days=1)

    for _ in range(extra):
        days.append(cursor)
        cursor -= timedelta(days=2)
    return sorted(days)


def clear_all(session_factory: SessionFactory) -> None:
    """Delete every mood entry, completion, habit and user."""

    with session_factory() as session:
        for model in (MoodEntry, HabitCompletion, Habit, User):
            rows = session.exec(select(model)).all()
            for row in rows:
                session.delete(row)
            session.flush()
        session.commit()


def run_demo_seed(
    session_factory: SessionFactory,
    *,
    config: Optional[BaseConfig] = None,
    clock: Optional[Clock] = None,
) -> SeedSummary:
    """Wipe the database and load the demo data set."""

    config = config or BaseConfig()
    clear_all(session_factory)
    logger.info("Cleared existing data")

    user = create_user(
        email=DEMO_EMAIL,
        name=DEMO_NAME,
        password=DEMO_PASSWORD,
        timezone=config.DEFAULT_TIMEZONE,
        session_factory=session_factory,
    )
    logger.info("User created: %s", user.email)

    habits = HabitService(session_factory, config=config, clock=clock)
    today = local_today(resolve_zone(user.timezone), clock)
    completions = 0
    for spec in HABIT_SPECS:
        habit = habits.create_habit(
            user.id,
            spec["name"],
            description=spec["description"],
            icon=spec["icon"],
            target=spec["target"],
            category=spec["category"],
        )
        days = completion_days(
            today,
            streak=spec["streak"],
            best=spec["best"],
            count=spec["count"],
            completed_today=spec["today"] is True,
        )
        for day in days:
            note = spec.get("note") if day == today else None
            habits.toggle_completion(habit.id, day, True, note)
            completions += 1
        if spec["today"] is False:
            habits.toggle_completion(habit.id, today, False)
            completions += 1
    logger.info("Created %d habits", len(HABIT_SPECS))

    moods = MoodService(session_factory, clock=clock)
    for days_ago, score, note in MOOD_SPECS:
        moods.record(user.id, today - timedelta(days=days_ago), score, note)
    logger.info("Created mood entries")

    return SeedSummary(
        users=1,
        habits=len(HABIT_SPECS),
        completions=completions,
        mood_entries=len(MOOD_SPECS),
    )


__all__ = ["HABIT_SPECS", "MOOD_SPECS", "SeedSummary", "clear_all", "completion_days", "run_demo_seed"]
