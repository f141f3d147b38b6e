"""Pathfinder 2e checks: degrees of success, dice rolls and penalties."""

from __future__ import annotations

import logging
import math
import random
from enum import IntEnum
from typing import Container, Optional

logger = logging.getLogger(__name__)

MAP1_TAG = "Conditions.MAP.1"
MAP2_TAG = "Conditions.MAP.2"


class DegreeOfSuccess(IntEnum):
    """Outcome of a check, ordered from worst to best."""

    CRITICAL_FAILURE = 0
    FAILURE = 1
    SUCCESS = 2
    CRITICAL_SUCCESS = 3


_DEGREE_NAMES = {
    DegreeOfSuccess.CRITICAL_SUCCESS: "Critical Success",
    DegreeOfSuccess.SUCCESS: "Success",
    DegreeOfSuccess.FAILURE: "Failure",
    DegreeOfSuccess.CRITICAL_FAILURE: "Critical Failure",
}


def _round_to_int(value: float) -> int:
    return math.floor(value + 0.5)


def _source(rng: Optional[random.Random]):
    return rng if rng is not None else random


def apply_natural_roll_modifiers(base_result: DegreeOfSuccess, d20_result: int) -> DegreeOfSuccess:
    """A natural 20 improves the result one degree, a natural 1 worsens it one degree."""
    if d20_result == 20:
        return DegreeOfSuccess(min(base_result + 1, DegreeOfSuccess.CRITICAL_SUCCESS))
    if d20_result == 1:
        return DegreeOfSuccess(max(base_result - 1, DegreeOfSuccess.CRITICAL_FAILURE))
    return DegreeOfSuccess(base_result)


def calculate_degree_of_success(roll: int, dc: int, d20_result: int) -> DegreeOfSuccess:
    """Degree of success of a total ``roll`` against ``dc``, given the natural d20."""
    if roll >= dc + 10:
        base = DegreeOfSuccess.CRITICAL_SUCCESS
    elif roll >= dc:
        base = DegreeOfSuccess.SUCCESS
    elif roll >= dc - 10:
        base = DegreeOfSuccess.FAILURE
    else:
        base = DegreeOfSuccess.CRITICAL_FAILURE
    return apply_natural_roll_modifiers(base, d20_result)


def roll_d20(max_die_roll: int = 20, rng: Optional[random.Random] = None) -> int:
    """Roll 1..max_die_roll, the ceiling clamped to 1..20."""
    max_die_roll = min(max(max_die_roll, 1), 20)
    result = _source(rng).randint(1, max_die_roll)
    logger.debug("d20 roll = %d (max die %d)", result, max_die_roll)
    return result


def _check(kind: str, bonus: int, dc: int, penalty: int, max_die_roll: int,
           rng: Optional[random.Random]) -> DegreeOfSuccess:
    d20 = roll_d20(max_die_roll, rng)
    total = d20 + bonus - penalty
    logger.debug("%s roll %d + %d - %d = %d vs DC %d (max die %d)",
                 kind, d20, bonus, penalty, total, dc, max_die_roll)
    return calculate_degree_of_success(total, dc, d20)


def roll_attack(attack_bonus: int, target_ac: int, max_die_roll: int = 20,
                rng: Optional[random.Random] = None) -> DegreeOfSuccess:
    return _check("attack", attack_bonus, target_ac, 0, max_die_roll, rng)


def roll_save(save_bonus: int, dc: int, max_die_roll: int = 20,
              rng: Optional[random.Random] = None) -> DegreeOfSuccess:
    return _check("save", save_bonus, dc, 0, max_die_roll, rng)


def roll_skill_check(skill_bonus: int, dc: int, max_die_roll: int = 20,
                     rng: Optional[random.Random] = None) -> DegreeOfSuccess:
    return _check("skill", skill_bonus, dc, 0, max_die_roll, rng)


def roll_attack_with_penalty(attack_bonus: int, target_ac: int, range_penalty: int,
                             max_die_roll: int = 20,
                             rng: Optional[random.Random] = None) -> DegreeOfSuccess:
    return _check("attack", attack_bonus, target_ac, range_penalty, max_die_roll, rng)


def calculate_map_penalty(tags: Container[str], is_agile: bool) -> float:
    """Multiple attack penalty implied by the MAP condition tags held."""
    if MAP2_TAG in tags:
        return 8.0 if is_agile else 10.0
    if MAP1_TAG in tags:
        return 4.0 if is_agile else 5.0
    return 0.0


def apply_damage_multiplier(base_damage: float, result: DegreeOfSuccess) -> float:
    """Scale damage by the outcome of a save: none, half, full or double."""
    if result == DegreeOfSuccess.CRITICAL_SUCCESS:
        return 0.0
    if result == DegreeOfSuccess.SUCCESS:
        return base_damage / 2.0
    if result == DegreeOfSuccess.CRITICAL_FAILURE:
        return base_damage * 2.0
    return base_damage


def roll_damage(damage_die: float, damage_die_count: float, damage_bonus: float = 0.0,
                rng: Optional[random.Random] = None) -> float:
    """Roll ``damage_die_count`` dice of size ``damage_die`` and add a flat bonus."""
    source = _source(rng)
    dice = _round_to_int(damage_die_count)
    size = max(_round_to_int(damage_die), 1)
    total = sum(float(source.randint(1, size)) for _ in range(max(dice, 0)))
    return total + damage_bonus


def degree_of_success_string(degree: object) -> str:
    return _DEGREE_NAMES.get(degree, "Unknown")