"""Combat attributes: health, defences, actions, attack data, resistances and weaknesses."""

from __future__ import annotations

import logging

from .base import AttributeSet, Event

logger = logging.getLogger(__name__)

HEALTH = "health"
MAX_HEALTH = "max_health"
PERCEPTION = "perception"
AC = "ac"
FORTITUDE = "fortitude"
REFLEX = "reflex"
WILL = "will"
MOVEMENT_SPEED = "movement_speed"
INITIATIVE = "initiative"
ACTIONS_REMAINING = "actions_remaining"
MAX_ACTIONS = "max_actions"
REACTION_AVAILABLE = "reaction_available"
ATTACK_BONUS = "attack_bonus"
DAMAGE_BONUS = "damage_bonus"
DAMAGE_DIE = "damage_die"
DAMAGE_DIE_COUNT = "damage_die_count"
MAX_DIE_ROLL = "max_die_roll"
INCOMING_DAMAGE = "incoming_damage"
INCOMING_HEALING = "incoming_healing"

DAMAGE_KINDS: tuple[str, ...] = (
    "bludgeoning",
    "piercing",
    "slashing",
    "fire",
    "cold",
    "electricity",
    "acid",
    "sonic",
    "force",
    "necrotic",
    "poison",
    "mental",
)


def resistance_attribute(kind: str) -> str:
    """Name of the resistance attribute for a damage kind."""
    if kind not in DAMAGE_KINDS:
        raise KeyError(f"unknown damage kind {kind!r}")
    return f"resistance_{kind}"


def weakness_attribute(kind: str) -> str:
    """Name of the weakness attribute for a damage kind."""
    if kind not in DAMAGE_KINDS:
        raise KeyError(f"unknown damage kind {kind!r}")
    return f"weakness_{kind}"


def _clamp(value: float, low: float, high: float) -> float:
    if value < low:
        return low
    return value if value < high else high


class CombatAttributeSet(AttributeSet):
    """Attributes a combatant fights with, and the events raised when they change."""

    attributes = (
        HEALTH,
        MAX_HEALTH,
        PERCEPTION,
        AC,
        FORTITUDE,
        REFLEX,
        WILL,
        MOVEMENT_SPEED,
        INITIATIVE,
        ACTIONS_REMAINING,
        MAX_ACTIONS,
        REACTION_AVAILABLE,
        ATTACK_BONUS,
        DAMAGE_BONUS,
        DAMAGE_DIE,
        DAMAGE_DIE_COUNT,
        MAX_DIE_ROLL,
        INCOMING_DAMAGE,
        INCOMING_HEALING,
        *(f"resistance_{kind}" for kind in DAMAGE_KINDS),
        *(f"weakness_{kind}" for kind in DAMAGE_KINDS),
    )

    def __init__(self) -> None:
        super().__init__()
        self.on_health_changed = Event()
        self.on_ac_changed = Event()
        self.on_fortitude_changed = Event()
        self.on_reflex_changed = Event()
        self.on_will_changed = Event()
        self.on_actions_remaining_changed = Event()
        self.on_reaction_available_changed = Event()

    def post_effect_execute(self, attribute: str, magnitude: float) -> None:
        """Clamp the changed attribute where needed and announce the change."""
        if attribute == HEALTH:
            self.set(HEALTH, _clamp(self.get(HEALTH), 0.0, self.get(MAX_HEALTH)))
            self.on_health_changed.broadcast(magnitude, self.get(HEALTH))
        elif attribute == AC:
            self.on_ac_changed.broadcast(magnitude, self.get(AC))
        elif attribute == FORTITUDE:
            self.on_fortitude_changed.broadcast(magnitude, self.get(FORTITUDE))
        elif attribute == REFLEX:
            self.on_reflex_changed.broadcast(magnitude, self.get(REFLEX))
        elif attribute == WILL:
            self.on_will_changed.broadcast(magnitude, self.get(WILL))
        elif attribute == ACTIONS_REMAINING:
            clamped = _clamp(self.get(ACTIONS_REMAINING), 0.0, self.get(MAX_ACTIONS))
            self.set(ACTIONS_REMAINING, clamped)
            self.on_actions_remaining_changed.broadcast(magnitude, clamped)
        elif attribute == REACTION_AVAILABLE:
            self.set(REACTION_AVAILABLE, _clamp(self.get(REACTION_AVAILABLE), 0.0, 1.0))
            self.on_reaction_available_changed.broadcast(magnitude, self.get(REACTION_AVAILABLE))
        elif attribute == INCOMING_DAMAGE:
            damage = self.get(INCOMING_DAMAGE)
            old_health = self.get(HEALTH)
            new_health = max(0.0, old_health - damage)
            self.set(HEALTH, new_health)
            self.set(INCOMING_DAMAGE, 0.0)
            self.on_health_changed.broadcast(-damage, new_health)
            logger.info("Applied %f damage. Health: %f -> %f", damage, old_health, new_health)
        elif attribute == INCOMING_HEALING:
            healing = self.get(INCOMING_HEALING)
            old_health = self.get(HEALTH)
            new_health = min(self.get(MAX_HEALTH), old_health + healing)
            self.set(HEALTH, new_health)
            self.set(INCOMING_HEALING, 0.0)
            self.on_health_changed.broadcast(healing, new_health)
            logger.info("Applied %f healing. Health: %f -> %f", healing, old_health, new_health)