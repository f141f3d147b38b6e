"""Damage execution: critical hits, deadly dice, resistances and weaknesses."""

from __future__ import annotations

import logging
import math
import random
from typing import Optional

from .base import AbilitySystemComponent, EffectSpec, ModOp, tag_matches
from .combat_attributes import INCOMING_DAMAGE, resistance_attribute, weakness_attribute

logger = logging.getLogger(__name__)

DAMAGE_DATA_TAG = "Data.Damage"
DAMAGE_PARENT_TAG = "Damage"
UNTYPED_DAMAGE_TAG = "Damage.Untyped"
CRITICAL_HIT_TAG = "Effect.CriticalHit"
DEADLY_TAGS: tuple[tuple[str, int], ...] = (
    ("Weapon.Trait.Deadly.d6", 6),
    ("Weapon.Trait.Deadly.d8", 8),
    ("Weapon.Trait.Deadly.d10", 10),
    ("Weapon.Trait.Deadly.d12", 12),
)

DAMAGE_TYPE_KINDS: dict[str, str] = {
    "Damage.Physical.Bludgeoning": "bludgeoning",
    "Damage.Physical.Piercing": "piercing",
    "Damage.Physical.Slashing": "slashing",
    "Damage.Energy.Fire": "fire",
    "Damage.Energy.Cold": "cold",
    "Damage.Energy.Electricity": "electricity",
    "Damage.Energy.Acid": "acid",
    "Damage.Energy.Sonic": "sonic",
    "Damage.Force": "force",
    "Damage.Negative": "necrotic",
    "Damage.Poison": "poison",
    "Damage.Mental": "mental",
}


def _round_to_int(value: float) -> int:
    return math.floor(value + 0.5)


class DamageExecution:
    """Turns a damage effect into an amount added to the target's incoming damage."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random()

    def execute(
        self,
        spec: EffectSpec,
        source: Optional[AbilitySystemComponent],
        target: Optional[AbilitySystemComponent],
    ) -> list[tuple[str, ModOp, float]]:
        """Work out the final damage; return the modifiers to apply to the target."""
        if source is None or target is None:
            logger.warning("damage execution: missing source or target")
            return []
        base_damage = max(spec.get_set_by_caller_magnitude(DAMAGE_DATA_TAG, -1.0), 0.0)
        if base_damage <= 0.0:
            logger.warning("damage execution: no damage data found")
            return []
        logger.info("damage execution: processing %f base damage", base_damage)

        damage_type = self.damage_type_from_spec(spec)
        if damage_type is None:
            logger.warning("damage execution: no damage type found on effect")
            damage_type = UNTYPED_DAMAGE_TAG

        if self.is_critical_hit(spec):
            base_damage *= 2.0
            base_damage += self.deadly_bonus(spec)
            logger.info("critical hit, damage now %f", base_damage)

        final_damage = self.apply_resistance_and_weakness(base_damage, damage_type, target)
        final_damage = max(0.0, final_damage)
        avatar = getattr(target, "avatar", None)
        if avatar is not None:
            logger.warning("%s took %f damage", getattr(avatar, "name", avatar), final_damage)
        return [(INCOMING_DAMAGE, ModOp.ADDITIVE, final_damage)]

    def _rounded_attribute(self, target: Optional[AbilitySystemComponent], attribute: str) -> int:
        if target is None:
            return 0
        try:
            return _round_to_int(target.get_numeric_attribute(attribute))
        except KeyError:
            return 0

    def resistance_value(self, damage_type: str, target: Optional[AbilitySystemComponent]) -> int:
        """The target's resistance to a damage type, or 0 if it has none."""
        kind = DAMAGE_TYPE_KINDS.get(damage_type)
        if kind is None:
            return 0
        return self._rounded_attribute(target, resistance_attribute(kind))

    def weakness_value(self, damage_type: str, target: Optional[AbilitySystemComponent]) -> int:
        """The target's weakness to a damage type, or 0 if it has none."""
        kind = DAMAGE_TYPE_KINDS.get(damage_type)
        if kind is None:
            return 0
        return self._rounded_attribute(target, weakness_attribute(kind))

    def apply_resistance_and_weakness(
        self, base_damage: float, damage_type: str, target: Optional[AbilitySystemComponent]
    ) -> float:
        """Subtract resistance (not below 0), then add weakness."""
        damage = base_damage
        resistance = self.resistance_value(damage_type, target)
        if resistance > 0:
            damage = max(0.0, damage - resistance)
            logger.info("applied %d resistance to %s: %f -> %f",
                        resistance, damage_type, base_damage, damage)
        weakness = self.weakness_value(damage_type, target)
        if weakness > 0:
            damage += weakness
            logger.info("applied %d weakness to %s: %f -> %f",
                        weakness, damage_type, damage - weakness, damage)
        return damage

    def is_critical_hit(self, spec: EffectSpec) -> bool:
        return spec.dynamic_asset_tags.has_tag(CRITICAL_HIT_TAG)

    def deadly_bonus(self, spec: EffectSpec) -> float:
        """Roll the weapon's deadly die, if it has one; otherwise 0."""
        for tag, die_size in DEADLY_TAGS:
            if spec.dynamic_asset_tags.has_tag(tag):
                extra = float(self.rng.randint(1, die_size))
                logger.info("applied deadly d%d trait: +%f damage", die_size, extra)
                return extra
        return 0.0

    def damage_type_from_spec(self, spec: EffectSpec) -> Optional[str]:
        """The first dynamic tag under ``Damage``, or None."""
        for tag in spec.dynamic_asset_tags:
            if tag_matches(tag, DAMAGE_PARENT_TAG):
                return tag
        return None