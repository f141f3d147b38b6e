"""The base gameplay ability: attacks, saves, damage rolls and the multiple attack penalty."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from .base import AbilitySystemComponent, EffectSpec
from .combat_attributes import (
    AC,
    ATTACK_BONUS,
    DAMAGE_BONUS,
    DAMAGE_DIE,
    DAMAGE_DIE_COUNT,
    MAX_DIE_ROLL,
)
from .combat_library import (
    MAP1_TAG,
    MAP2_TAG,
    DegreeOfSuccess,
    calculate_map_penalty,
    roll_attack,
    roll_attack_with_penalty,
    roll_damage,
    roll_save,
)
from .damage_calculation import CRITICAL_HIT_TAG, DAMAGE_DATA_TAG, UNTYPED_DAMAGE_TAG
from .spells_attributes import SPELL_ATTACK_BONUS

logger = logging.getLogger(__name__)

_DEADLY_TAGS_BY_SIZE = {
    6: "Weapon.Trait.Deadly.d6",
    8: "Weapon.Trait.Deadly.d8",
    10: "Weapon.Trait.Deadly.d10",
    12: "Weapon.Trait.Deadly.d12",
}


class AbilityCategory(Enum):
    """What kind of roll an ability makes."""

    ATTACK = "attack"
    SPELL_ATTACK = "spell_attack"
    SAVE = "save"


class SpellArea(Enum):
    """The shape of the area an ability affects."""

    SINGLE_TARGET = "single_target"
    MULTIPLE_TARGETS = "multiple_targets"
    BURST = "burst"
    SELF_OR_EMANATION = "self_or_emanation"
    LINE = "line"
    CONE = "cone"


@dataclass(eq=False)
class GameplayAbility:
    """An ability a combatant can use: its settings and the rolls it makes.

    The owner is expected to expose ``ability_system_component``,
    ``combat_attributes``, ``spells_attributes`` and ``location_index``.
    ``damage_effect`` builds the effect spec used to deal damage.
    """

    display_name: str = "Base Ability"
    description: str = "A basic ability"
    icon: Any = None
    category: AbilityCategory = AbilityCategory.ATTACK
    action_cost: int = 1
    range: int = 5
    requires_target: bool = True
    can_target_self: bool = False
    can_target_allies: bool = False
    can_target_enemies: bool = True
    is_sub_ability: bool = False
    spell_level: int = 0
    area_type: SpellArea = SpellArea.SINGLE_TARGET
    area_size: int = 1
    max_targets: int = 1
    damage_type: Optional[str] = None
    base_damage: int = 6
    save_dc: int = 15
    damage_dice_count: int = 2
    bonus_damage_dice: int = 0
    bonus_damage_flat: int = 0
    can_sneak_attack: bool = False
    is_agile: bool = False
    has_deadly_trait: bool = False
    deadly_die_size: int = 6
    has_variants: bool = False
    supported_variants: list = field(default_factory=list)
    damage_effect: Optional[Callable[[], EffectSpec]] = None
    level: int = 1
    rng: random.Random = field(default_factory=random.Random)

    is_targeting: bool = field(default=False, init=False)
    current_hovered_tile: tuple[int, int] = field(default=(-1, -1), init=False)
    targeted_tiles: list[tuple[int, int]] = field(default_factory=list, init=False)
    owning_combatant: Any = field(default=None, init=False)
    cached_asc: Optional[AbilitySystemComponent] = field(default=None, init=False)

    def on_give_ability(self, asc: AbilitySystemComponent, owner: Any) -> None:
        """Remember the ability system and combatant this ability was granted to."""
        self.cached_asc = asc
        self.owning_combatant = owner

    def _owner(self) -> Any:
        if self.owning_combatant is None or self.cached_asc is None:
            raise RuntimeError(f"ability {self.display_name!r} has not been granted")
        return self.owning_combatant

    def cancel_all_other_active_abilities(self) -> None:
        """Cancel every active ability of the owner except this one."""
        asc = self.cached_asc
        if asc is None:
            return
        to_cancel = [
            spec.handle
            for spec in asc.activatable_abilities
            if spec.active and spec.ability is not self
        ]
        for handle in to_cancel:
            asc.cancel_ability_handle(handle)

    def roll_ability_damage(self) -> float:
        """Roll the spell's own dice, or the owner's weapon dice with this ability's bonuses."""
        if self.category in (AbilityCategory.SPELL_ATTACK, AbilityCategory.SAVE):
            return roll_damage(self.base_damage, self.damage_dice_count, 0.0, rng=self.rng)
        combat = self._owner().combat_attributes
        dice_count = combat.get(DAMAGE_DIE_COUNT) + self.bonus_damage_dice
        bonus = combat.get(DAMAGE_BONUS) + self.bonus_damage_flat
        return roll_damage(combat.get(DAMAGE_DIE), dice_count, bonus, rng=self.rng)

    def roll_ability_attack(self, target: Any, range_penalty: float = 0) -> DegreeOfSuccess:
        """Roll an attack against the target's AC, then advance the attack penalty."""
        owner = self._owner()
        if target is None:
            raise ValueError("an attack needs a target")
        map_penalty = calculate_map_penalty(self.cached_asc.owned_tags(), self.is_agile)
        logger.info("MAP penalty: %f", map_penalty)
        target_ac = int(target.ability_system_component.get_numeric_attribute(AC))
        if self.category is AbilityCategory.SPELL_ATTACK:
            attack_bonus = int(owner.spells_attributes.get(SPELL_ATTACK_BONUS))
        else:
            attack_bonus = int(owner.combat_attributes.get(ATTACK_BONUS))
        max_die_roll = int(owner.combat_attributes.get(MAX_DIE_ROLL))
        total_penalty = int(range_penalty + map_penalty)
        if total_penalty > 0:
            result = roll_attack_with_penalty(
                attack_bonus, target_ac, total_penalty, max_die_roll, rng=self.rng
            )
        else:
            result = roll_attack(attack_bonus, target_ac, max_die_roll, rng=self.rng)
        self.apply_map_tags()
        return result

    def roll_saving_throw(self, target_save_bonus: int = 5) -> DegreeOfSuccess:
        """Roll the target's save against this ability's DC."""
        return roll_save(target_save_bonus, self.save_dc, rng=self.rng)

    def get_ability_area(self, target_location: tuple[int, int]) -> list[tuple[int, int]]:
        """The squares the ability affects when aimed at ``target_location``."""
        if self.area_type is SpellArea.MULTIPLE_TARGETS:
            return []
        return [tuple(target_location)]

    def calculate_distance_to_target(self, target: Any) -> int:
        """Grid distance (the larger axis difference) to the target, or -1 if unknown."""
        if target is None or self.owning_combatant is None:
            return -1
        ox, oy = self.owning_combatant.location_index
        tx, ty = target.location_index
        return max(abs(ox - tx), abs(oy - ty))

    def has_line_of_sight(self, target: Any) -> bool:
        """Line of sight is always assumed."""
        return True

    def apply_map_tags(self) -> None:
        """Advance the multiple attack penalty: none to MAP.1, MAP.1 to MAP.2."""
        asc = self.cached_asc
        if asc is None:
            return
        owned = asc.owned_tags()
        if MAP1_TAG not in owned and MAP2_TAG not in owned:
            asc.add_loose_tag(MAP1_TAG)
        elif MAP1_TAG in owned:
            asc.remove_loose_tag(MAP1_TAG)
            asc.add_loose_tag(MAP2_TAG)

    def deadly_tag(self) -> str:
        """The deadly trait tag for this weapon's die size; unknown sizes fall back to d6."""
        return _DEADLY_TAGS_BY_SIZE.get(self.deadly_die_size, _DEADLY_TAGS_BY_SIZE[6])

    def apply_damage_to_target(
        self, target: Any, damage_amount: float, is_critical_hit: bool = False
    ) -> Optional[EffectSpec]:
        """Build the damage effect and apply it to the target; return the applied spec."""
        if target is None or self.damage_effect is None:
            logger.warning("apply damage: missing target or damage effect")
            return None
        target_asc = getattr(target, "ability_system_component", None)
        if target_asc is None:
            logger.warning("apply damage: target has no ability system")
            return None
        self._owner()
        spec = self.damage_effect()
        spec.level = float(self.level)
        spec.set_set_by_caller_magnitude(DAMAGE_DATA_TAG, damage_amount)
        spec.add_dynamic_asset_tag(self.damage_type or UNTYPED_DAMAGE_TAG)
        if is_critical_hit:
            spec.add_dynamic_asset_tag(CRITICAL_HIT_TAG)
        if self.has_deadly_trait:
            spec.add_dynamic_asset_tag(self.deadly_tag())
        self.cached_asc.apply_effect_spec_to_target(spec, target_asc)
        logger.info(
            "applied %f %s damage to %s (crit: %s)",
            damage_amount,
            self.damage_type or "Untyped",
            getattr(target, "name", target),
            "yes" if is_critical_hit else "no",
        )
        return spec