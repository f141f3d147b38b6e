"""Spellcasting resources as attributes: slots, focus points, spell attack and DC."""

from __future__ import annotations

from .base import AttributeSet, Event

SPELL_ATTACK_BONUS = "spell_attack_bonus"
SPELL_SAVE_DC = "spell_save_dc"
IS_SPONTANEOUS = "is_spontaneous"
PREPARABLE_CANTRIPS = "preparable_cantrips"
LEVEL1_SLOTS = "level1_slots"
LEVEL1_SLOT1 = "level1_slot1"
LEVEL1_SLOT2 = "level1_slot2"
LEVEL1_SLOT3 = "level1_slot3"
LEVEL2_SLOTS = "level2_slots"
LEVEL2_SLOT1 = "level2_slot1"
LEVEL2_SLOT2 = "level2_slot2"
LEVEL2_SLOT3 = "level2_slot3"
LEVEL3_SLOTS = "level3_slots"
LEVEL3_SLOT1 = "level3_slot1"
LEVEL3_SLOT2 = "level3_slot2"
LEVEL3_SLOT3 = "level3_slot3"
DIVINE_FONT = "divine_font"
MAX_FOCUS_POINTS = "max_focus_points"
CURRENT_FOCUS_POINTS = "current_focus_points"


class SpellsAttributeSet(AttributeSet):
    """Spellcasting attributes; everything starts at 0 except the save DC, which starts at 10.

    ``is_spontaneous`` is 0 for a prepared caster and 1 for a spontaneous one;
    the individual ``levelN_slotM`` attributes hold 0 or 1.
    """

    attributes = (
        SPELL_ATTACK_BONUS,
        SPELL_SAVE_DC,
        IS_SPONTANEOUS,
        PREPARABLE_CANTRIPS,
        LEVEL1_SLOTS,
        LEVEL1_SLOT1,
        LEVEL1_SLOT2,
        LEVEL1_SLOT3,
        LEVEL2_SLOTS,
        LEVEL2_SLOT1,
        LEVEL2_SLOT2,
        LEVEL2_SLOT3,
        LEVEL3_SLOTS,
        LEVEL3_SLOT1,
        LEVEL3_SLOT2,
        LEVEL3_SLOT3,
        DIVINE_FONT,
        MAX_FOCUS_POINTS,
        CURRENT_FOCUS_POINTS,
    )
    defaults = {SPELL_SAVE_DC: 10.0}

    def __init__(self) -> None:
        super().__init__()
        self.on_spell_attack_bonus_changed = Event()
        self.on_spell_save_dc_changed = Event()
        self.on_level1_slots_changed = Event()
        self.on_level2_slots_changed = Event()
        self.on_level3_slots_changed = Event()
        self.on_current_focus_points_changed = Event()

    def _event_for(self, attribute: str) -> Event | None:
        return {
            SPELL_ATTACK_BONUS: self.on_spell_attack_bonus_changed,
            SPELL_SAVE_DC: self.on_spell_save_dc_changed,
            LEVEL1_SLOTS: self.on_level1_slots_changed,
            LEVEL2_SLOTS: self.on_level2_slots_changed,
            LEVEL3_SLOTS: self.on_level3_slots_changed,
            CURRENT_FOCUS_POINTS: self.on_current_focus_points_changed,
        }.get(attribute)

    def post_effect_execute(self, attribute: str, magnitude: float) -> None:
        """Announce the change, then keep focus points within 0..max."""
        super().post_effect_execute(attribute, magnitude)
        event = self._event_for(attribute)
        if event is not None:
            event.broadcast(magnitude, self.get(attribute))
        if attribute == CURRENT_FOCUS_POINTS:
            current = self.get(CURRENT_FOCUS_POINTS)
            self.set(CURRENT_FOCUS_POINTS, min(max(current, 0.0), self.get(MAX_FOCUS_POINTS)))