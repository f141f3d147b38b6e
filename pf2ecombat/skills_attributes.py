"""The sixteen core skills as attributes, with a change event for each."""

from __future__ import annotations

from .base import AttributeSet, Event

SKILLS: tuple[str, ...] = (
    "acrobatics",
    "arcana",
    "athletics",
    "crafting",
    "deception",
    "diplomacy",
    "intimidation",
    "medicine",
    "nature",
    "occultism",
    "performance",
    "religion",
    "society",
    "stealth",
    "survival",
    "thievery",
)


class SkillsAttributeSet(AttributeSet):
    """Skill modifiers, all starting at 0 (untrained)."""

    attributes = SKILLS

    def __init__(self) -> None:
        super().__init__()
        self.changed_events: dict[str, Event] = {skill: Event() for skill in SKILLS}

    def post_effect_execute(self, attribute: str, magnitude: float) -> None:
        """Announce a skill's change with its delta and new value."""
        super().post_effect_execute(attribute, magnitude)
        event = self.changed_events.get(attribute)
        if event is not None:
            event.broadcast(magnitude, self.get(attribute))