"""Experience points and levels earned from focus sessions.

XP is cumulative. Reaching ``XP_PER_LEVEL * level`` total XP moves a user to
the next level, so level 1 ends at 100 XP, level 2 at 200 XP and so on.
"""

from __future__ import annotations

from dataclasses import dataclass

from momentum.constants import MIN_SESSION_XP, STARTING_LEVEL, XP_PER_LEVEL


@dataclass(frozen=True)
class Progress:
    xp: int = 0
    level: int = STARTING_LEVEL

    @property
    def next_level_xp(self) -> int:
        return XP_PER_LEVEL * self.level

    @property
    def progress_pct(self) -> int:
        return min(int(self.xp * 100 / self.next_level_xp), 100)

    def to_dict(self) -> dict:
        return {
            "xp": self.xp,
            "level": self.level,
            "next_level_xp": self.next_level_xp,
            "progress_pct": self.progress_pct,
        }


def session_xp(duration_minutes) -> int:
    """One XP per focused minute, never less than ``MIN_SESSION_XP``."""
    try:
        minutes = int(duration_minutes or 0)
    except (TypeError, ValueError):
        minutes = 0
    return max(MIN_SESSION_XP, minutes)


def add_xp(progress: Progress, amount: int) -> Progress:
    if amount < 0:
        raise ValueError("XP awards cannot be negative")
    xp = progress.xp + amount
    level = max(progress.level, STARTING_LEVEL)
    while xp >= XP_PER_LEVEL * level:
        level += 1
    return Progress(xp=xp, level=level)
