"""
Feedback messages shown alongside the detection state.
"""

import random
import time
from typing import Callable, Optional, Sequence

from .types import Classification

ROASTS = (
    "You'll fail if you don't stop!",
    "Your dreams called - they want your attention back!",
    "Scrolling won't make that deadline disappear!",
    "The phone can wait. Your future can't.",
    "Success doesn't scroll itself into existence!",
    "That screen won't study for you!",
    "Your goals > Your feed. Remember that.",
    "Future you is watching. They're disappointed.",
    "Every scroll is a step backward. Look up!",
    "The algorithm wins again. Pathetic.",
    "Is this really more important than your goals?",
    "Your productivity just left the chat.",
    "Doomscrolling detected! You're better than this!",
    "PUT. THE. PHONE. DOWN. NOW.",
    "This is why you're behind schedule.",
    "Your potential is crying right now.",
    "Champions don't doomscroll. Be a champion.",
    "The only thing you're winning is wasted time.",
    "Your phone doesn't love you back.",
    "Tick tock. That's your life slipping away.",
)

ENCOURAGEMENTS = (
    "Good posture! Keep it up!",
    "That's the focus we love to see!",
    "You're crushing it! Eyes on the prize!",
    "Productivity mode: ACTIVATED",
    "This is how winners operate!",
)


class FeedbackSelector:
    """Picks a roast while doomscrolling and an encouragement while focused."""

    def __init__(self, cooldown_sec: float = 3.0,
                 roasts: Sequence[str] = ROASTS,
                 encouragements: Sequence[str] = ENCOURAGEMENTS,
                 rng: Optional[random.Random] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.cooldown_sec = cooldown_sec
        self.roasts = roasts
        self.encouragements = encouragements
        self.rng = rng or random.Random()
        self.clock = clock
        self.current_roast = ""
        self.last_roast_time: Optional[float] = None

    def select(self, classification: Classification, now: Optional[float] = None) -> str:
        now = self.clock() if now is None else now

        if classification == Classification.DOOMSCROLLING:
            # Roast changes at most once per cooldown
            if self.last_roast_time is None or now - self.last_roast_time > self.cooldown_sec:
                self.current_roast = self.rng.choice(self.roasts)
                self.last_roast_time = now
            return self.current_roast

        if classification == Classification.NORMAL:
            return self.rng.choice(self.encouragements)

        return ""
