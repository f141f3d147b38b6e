"""A combatant: its attribute sets, turn handling, conditions and look-at rotation."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Iterable, Optional

from .base import AbilitySystemComponent, EffectSpec, Event, ModOp
from .combat_attributes import (
    AC,
    ACTIONS_REMAINING,
    ATTACK_BONUS,
    DAMAGE_BONUS,
    DAMAGE_DIE,
    DAMAGE_DIE_COUNT,
    FORTITUDE,
    HEALTH,
    INITIATIVE,
    MAX_ACTIONS,
    MAX_DIE_ROLL,
    MAX_HEALTH,
    MOVEMENT_SPEED,
    PERCEPTION,
    REACTION_AVAILABLE,
    REFLEX,
    WILL,
    CombatAttributeSet,
)
from .skills_attributes import SkillsAttributeSet
from .spells_attributes import (
    CURRENT_FOCUS_POINTS,
    DIVINE_FONT,
    IS_SPONTANEOUS,
    MAX_FOCUS_POINTS,
    PREPARABLE_CANTRIPS,
    SPELL_ATTACK_BONUS,
    SPELL_SAVE_DC,
    SpellsAttributeSet,
)

logger = logging.getLogger(__name__)

INCAPACITATED = "Conditions.Incapacitated"
STUNNED_1 = "Conditions.Stunned.1"
STUNNED_2 = "Conditions.Stunned.2"
STUNNED_3 = "Conditions.Stunned.3"
SLOWED_1 = "Conditions.Slowed.1"
SLOWED_2 = "Conditions.Slowed.2"
QUICKENED = "Conditions.Quickened"
MAP_TAGS = ("Conditions.MAP.1", "Conditions.MAP.2")
DEGRADING_CONDITIONS = ("Clumsy", "Enfeebled", "Frightened")

DEFAULT_ACTIONS = 3

# Checked in order; the first held tag decides the actions granted and
# whether the tag is consumed.
_ACTION_CONDITIONS: tuple[tuple[str, int, bool], ...] = (
    (STUNNED_1, 2, True),
    (STUNNED_2, 1, True),
    (STUNNED_3, 0, True),
    (SLOWED_1, 2, False),
    (SLOWED_2, 1, False),
    (QUICKENED, 4, False),
)


class CombatAttributeType(Enum):
    """Combat attributes that can be read or set by name."""

    HEALTH = HEALTH
    MAX_HEALTH = MAX_HEALTH
    AC = AC
    FORTITUDE = FORTITUDE
    REFLEX = REFLEX
    WILL = WILL
    PERCEPTION = PERCEPTION
    MOVEMENT_SPEED = MOVEMENT_SPEED
    INITIATIVE = INITIATIVE
    ACTIONS_REMAINING = ACTIONS_REMAINING
    MAX_ACTIONS = MAX_ACTIONS
    REACTION_AVAILABLE = REACTION_AVAILABLE
    ATTACK_BONUS = ATTACK_BONUS
    DAMAGE_BONUS = DAMAGE_BONUS
    DAMAGE_DIE = DAMAGE_DIE
    DAMAGE_DIE_COUNT = DAMAGE_DIE_COUNT
    MAX_DIE_ROLL = MAX_DIE_ROLL


@dataclass
class CombatStats:
    """Starting combat values for a combatant."""

    max_health: float = 0.0
    ac: float = 0.0
    fortitude: float = 0.0
    reflex: float = 0.0
    will: float = 0.0
    perception: float = 0.0
    movement_speed: float = 0.0
    max_actions: float = 3.0
    attack_bonus: float = 0.0
    damage_bonus: float = 0.0
    damage_die: float = 6.0
    damage_die_count: float = 1.0
    max_die_roll: float = 20.0


@dataclass
class SkillValues:
    """Starting skill modifiers."""

    acrobatics: float = 0.0
    arcana: float = 0.0
    athletics: float = 0.0
    crafting: float = 0.0
    deception: float = 0.0
    diplomacy: float = 0.0
    intimidation: float = 0.0
    medicine: float = 0.0
    nature: float = 0.0
    occultism: float = 0.0
    performance: float = 0.0
    religion: float = 0.0
    society: float = 0.0
    stealth: float = 0.0
    survival: float = 0.0
    thievery: float = 0.0


@dataclass
class SpellResources:
    """Starting spellcasting resources."""

    spell_attack_bonus: float = 0.0
    spell_save_dc: float = 10.0
    is_spontaneous: bool = False
    preparable_cantrips: float = 0.0
    level1_slots: float = 0.0
    level1_slot1: bool = False
    level1_slot2: bool = False
    level1_slot3: bool = False
    level2_slots: float = 0.0
    level2_slot1: bool = False
    level2_slot2: bool = False
    level2_slot3: bool = False
    level3_slots: float = 0.0
    level3_slot1: bool = False
    level3_slot2: bool = False
    level3_slot3: bool = False
    divine_font: float = 0.0
    max_focus_points: float = 0.0


def _round_to_int(value: float) -> int:
    return math.floor(value + 0.5)


def _normalize_angle(angle: float) -> float:
    angle %= 360.0
    if angle > 180.0:
        angle -= 360.0
    return angle


def _interp_angle(current: float, target: float, delta_time: float, speed: float) -> float:
    """Move ``current`` toward ``target`` by the shortest way, at ``speed`` per second."""
    if speed <= 0.0:
        return _normalize_angle(target)
    delta = _normalize_angle(target - current)
    if abs(delta) < 1e-4:
        return _normalize_angle(target)
    step = min(max(delta_time * speed, 0.0), 1.0)
    return _normalize_angle(current + delta * step)


class Combatant:
    """A unit taking part in combat, with its ability system and three attribute sets."""

    def __init__(
        self,
        name: str = "Combatant",
        *,
        location: tuple[float, float, float] = (0.0, 0.0, 0.0),
        location_index: tuple[int, int] = (0, 0),
        turn_manager: Any = None,
        look_at_speed: float = 5.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.name = name
        self.location = tuple(float(c) for c in location)
        self.location_index = tuple(location_index)
        self.turn_manager = turn_manager
        self.rng = rng if rng is not None else random.Random()

        self.ability_system_component = AbilitySystemComponent(self, self)
        self.combat_attributes = self.ability_system_component.add_attribute_set(
            CombatAttributeSet()
        )
        self.skills_attributes = self.ability_system_component.add_attribute_set(
            SkillsAttributeSet()
        )
        self.spells_attributes = self.ability_system_component.add_attribute_set(
            SpellsAttributeSet()
        )

        self.initiative_light_visible = False
        self.is_hovered = False
        self.is_selected = False
        self.on_hover_or_select_changed = Event()

        self.rotation = 0.0
        self.original_rotation = 0.0
        self.should_look_at = False
        self.look_at_target_location = self.location
        self.look_at_speed = look_at_speed

        combat = self.combat_attributes
        combat.on_health_changed.subscribe(self.handle_health_change)
        combat.on_ac_changed.subscribe(self._handle_ac_change)
        combat.on_fortitude_changed.subscribe(self._handle_fortitude_change)
        combat.on_reflex_changed.subscribe(self._handle_reflex_change)
        combat.on_will_changed.subscribe(self._handle_will_change)
        combat.on_actions_remaining_changed.subscribe(self.handle_actions_remaining_change)
        combat.on_reaction_available_changed.subscribe(self._handle_reaction_available_change)

    def __repr__(self) -> str:
        return f"Combatant({self.name!r})"

    def roll_initiative(self) -> float:
        """Initiative attribute plus a random value between 1 and 20."""
        return self.combat_attributes.get(INITIATIVE) + self.rng.uniform(1.0, 20.0)

    def spend_reaction(self) -> None:
        self.ability_system_component.apply_mod_to_attribute(
            REACTION_AVAILABLE, ModOp.OVERRIDE, 0.0
        )

    def cancel_all_active_abilities(self) -> None:
        asc = self.ability_system_component
        for handle in [spec.handle for spec in asc.activatable_abilities if spec.active]:
            asc.cancel_ability_handle(handle)

    def begin_turn(self) -> int:
        """Start this combatant's turn; return the number of actions granted."""
        asc = self.ability_system_component
        owned = asc.owned_tags()

        if INCAPACITATED in owned:
            self.end_turn_effects()
            return 0

        self.initiative_light_visible = True
        actions = DEFAULT_ACTIONS
        for tag, granted, consumed in _ACTION_CONDITIONS:
            if tag in owned:
                actions = granted
                if consumed:
                    asc.remove_loose_tag(tag)
                break

        asc.apply_mod_to_attribute(MAX_ACTIONS, ModOp.OVERRIDE, actions)
        asc.apply_mod_to_attribute(ACTIONS_REMAINING, ModOp.OVERRIDE, actions)
        asc.apply_mod_to_attribute(
            REACTION_AVAILABLE, ModOp.OVERRIDE, 1.0 if actions > 0 else 0.0
        )
        self.combat_attributes.on_actions_remaining_changed.broadcast(0, actions)

        if actions == 0 or STUNNED_3 in owned:
            self.end_turn_effects()
        return actions

    def end_turn_effects(self) -> None:
        """Hide the turn light, cancel abilities, clear MAP and step down degrading conditions."""
        self.initiative_light_visible = False
        self.cancel_all_active_abilities()

        asc = self.ability_system_component
        owned = asc.owned_tags()
        for tag in MAP_TAGS:
            if tag in owned:
                asc.remove_loose_tag(tag)

        for condition in DEGRADING_CONDITIONS:
            for level in (1, 2, 3):
                tag = f"Conditions.{condition}.{level}"
                if tag in owned:
                    asc.remove_loose_tag(tag)
                    if level > 1:
                        asc.add_loose_tag(f"Conditions.{condition}.{level - 1}")
                    break

    def _update_visual(self) -> None:
        self.on_hover_or_select_changed.broadcast(self.is_hovered, self.is_selected)

    def set_is_hovered(self, value: bool) -> None:
        self.is_hovered = bool(value)
        self._update_visual()

    def set_is_selected(self, value: bool) -> None:
        self.is_selected = bool(value)
        self._update_visual()

    def handle_health_change(self, magnitude: float, new_health: float) -> None:
        if new_health <= 0:
            logger.warning("Unit died!")
        logger.info("Health changed: %f", new_health)

    def _handle_ac_change(self, magnitude: float, new_value: float) -> None:
        logger.info("AC changed: %f", new_value)

    def _handle_fortitude_change(self, magnitude: float, new_value: float) -> None:
        logger.info("Fortitude changed: %f", new_value)

    def _handle_reflex_change(self, magnitude: float, new_value: float) -> None:
        logger.info("Reflex changed: %f", new_value)

    def _handle_will_change(self, magnitude: float, new_value: float) -> None:
        logger.info("Will changed: %f", new_value)

    def _handle_reaction_available_change(self, magnitude: float, new_value: float) -> None:
        logger.info("Reaction available changed: %f", new_value)

    def handle_actions_remaining_change(
        self, magnitude: float, new_actions_remaining: float
    ) -> None:
        """Tell the turn manager how many actions are left, rounded to a whole number."""
        logger.debug("actions remaining changed by %f to %f", magnitude, new_actions_remaining)
        if self.turn_manager is None:
            logger.error("no turn manager to inform of action change")
            return
        self.turn_manager.on_action_spent_in_combatant(_round_to_int(new_actions_remaining))

    def set_combat_attribute(self, attribute_type: CombatAttributeType, value: float) -> None:
        """Set a combat attribute's base value without raising change events."""
        attribute = CombatAttributeType(attribute_type).value
        self.ability_system_component.set_numeric_attribute_base(attribute, value)

    def get_combat_attribute(self, attribute_type: CombatAttributeType) -> float:
        return self.combat_attributes.get(CombatAttributeType(attribute_type).value)

    def initialize_attributes(
        self,
        combat_data: CombatStats,
        skills_data: SkillValues,
        spells_data: SpellResources,
    ) -> None:
        """Load starting values: full health, full actions, reaction and focus available."""
        combat = self.combat_attributes
        combat.init(MAX_HEALTH, combat_data.max_health)
        combat.init(HEALTH, combat_data.max_health)
        combat.init(AC, combat_data.ac)
        combat.init(FORTITUDE, combat_data.fortitude)
        combat.init(REFLEX, combat_data.reflex)
        combat.init(WILL, combat_data.will)
        combat.init(PERCEPTION, combat_data.perception)
        combat.init(MOVEMENT_SPEED, combat_data.movement_speed)
        combat.init(INITIATIVE, combat_data.perception)
        combat.init(MAX_ACTIONS, combat_data.max_actions)
        combat.init(ACTIONS_REMAINING, combat_data.max_actions)
        combat.init(REACTION_AVAILABLE, 1.0)
        combat.init(ATTACK_BONUS, combat_data.attack_bonus)
        combat.init(DAMAGE_BONUS, combat_data.damage_bonus)
        combat.init(DAMAGE_DIE, combat_data.damage_die)
        combat.init(DAMAGE_DIE_COUNT, combat_data.damage_die_count)
        combat.init(MAX_DIE_ROLL, combat_data.max_die_roll)

        for skill in fields(SkillValues):
            self.skills_attributes.init(skill.name, getattr(skills_data, skill.name))

        spells = self.spells_attributes
        spells.init(SPELL_ATTACK_BONUS, spells_data.spell_attack_bonus)
        spells.init(SPELL_SAVE_DC, spells_data.spell_save_dc)
        spells.init(IS_SPONTANEOUS, 1.0 if spells_data.is_spontaneous else 0.0)
        spells.init(PREPARABLE_CANTRIPS, spells_data.preparable_cantrips)
        for level in (1, 2, 3):
            slots = f"level{level}_slots"
            spells.init(slots, getattr(spells_data, slots))
            for slot in (1, 2, 3):
                name = f"level{level}_slot{slot}"
                spells.init(name, 1.0 if getattr(spells_data, name) else 0.0)
        spells.init(DIVINE_FONT, spells_data.divine_font)
        spells.init(MAX_FOCUS_POINTS, spells_data.max_focus_points)
        spells.init(CURRENT_FOCUS_POINTS, spells_data.max_focus_points)

        logger.info(
            "attributes initialized - health %f/%f, AC %f, stealth %f, spell DC %f",
            combat.get(HEALTH),
            combat.get(MAX_HEALTH),
            combat.get(AC),
            self.skills_attributes.get("stealth"),
            spells.get(SPELL_SAVE_DC),
        )

    def init_starting_effects_and_abilities(
        self, starting_abilities: Iterable[Any], starting_effects: Iterable[Any]
    ) -> list[int]:
        """Grant abilities and apply effects to self; return the granted ability handles.

        An effect may be an ``EffectSpec`` (copied before use) or a callable returning one.
        Empty entries are skipped.
        """
        asc = self.ability_system_component
        handles = [asc.give_ability(ability, 1) for ability in starting_abilities if ability]
        for effect in starting_effects:
            if not effect:
                continue
            spec: EffectSpec = effect() if callable(effect) else replace(effect)
            spec.level = 1.0
            spec.source_object = self
            asc.apply_effect_spec_to_self(spec)
            logger.info("applied starting effect: %s", spec.name)
        return handles

    def enable_look_at(self) -> None:
        self.original_rotation = self.rotation
        self.should_look_at = True

    def disable_look_at(self) -> None:
        self.should_look_at = False

    def set_look_at_location(self, target_location: Iterable[float]) -> None:
        self.look_at_target_location = tuple(float(c) for c in target_location)

    def tick(self, delta_time: float) -> None:
        """Turn (yaw only) toward the look-at location while looking is enabled."""
        if not self.should_look_at:
            return
        dx = self.look_at_target_location[0] - self.location[0]
        dy = self.look_at_target_location[1] - self.location[1]
        target_yaw = math.degrees(math.atan2(dy, dx)) if (dx or dy) else 0.0
        self.rotation = _interp_angle(self.rotation, target_yaw, delta_time, self.look_at_speed)