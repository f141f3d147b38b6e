import random

import pytest

from pf2ecombat.base import AbilitySystemComponent, EffectSpec, ModOp
from pf2ecombat.combat_attributes import (
    HEALTH,
    INCOMING_DAMAGE,
    MAX_HEALTH,
    CombatAttributeSet,
    resistance_attribute,
    weakness_attribute,
)
from pf2ecombat.damage_calculation import DamageExecution


def make_asc(health=50.0):
    asc = AbilitySystemComponent()
    combat = asc.add_attribute_set(CombatAttributeSet())
    combat.init(MAX_HEALTH, health)
    combat.init(HEALTH, health)
    return asc, combat


def make_spec(damage, *tags):
    spec = EffectSpec(name="damage")
    spec.set_set_by_caller_magnitude("Data.Damage", damage)
    for tag in tags:
        spec.add_dynamic_asset_tag(tag)
    return spec


@pytest.fixture
def execution():
    return DamageExecution(random.Random(1))


def test_plain_damage(execution):
    source, _ = make_asc()
    target, _ = make_asc()
    out = execution.execute(make_spec(9, "Damage.Physical.Slashing"), source, target)
    assert out == [(INCOMING_DAMAGE, ModOp.ADDITIVE, 9.0)]


def test_missing_target_gives_nothing(execution):
    source, _ = make_asc()
    assert execution.execute(make_spec(9), source, None) == []


def test_no_damage_data_gives_nothing(execution):
    source, _ = make_asc()
    target, _ = make_asc()
    assert execution.execute(EffectSpec(), source, target) == []


def test_resistance_and_weakness(execution):
    source, _ = make_asc()
    target, combat = make_asc()
    combat.init(resistance_attribute("fire"), 3)
    combat.init(weakness_attribute("fire"), 4)
    assert execution.resistance_value("Damage.Energy.Fire", target) == 3
    assert execution.weakness_value("Damage.Energy.Fire", target) == 4
    out = execution.execute(make_spec(10, "Damage.Energy.Fire"), source, target)
    assert out[0][2] == 10 - 3 + 4


def test_resistance_cannot_go_below_zero_before_weakness(execution):
    target, combat = make_asc()
    combat.init(resistance_attribute("cold"), 20)
    combat.init(weakness_attribute("cold"), 2)
    assert execution.apply_resistance_and_weakness(5.0, "Damage.Energy.Cold", target) == 2.0


def test_negative_maps_to_necrotic(execution):
    target, combat = make_asc()
    combat.init(resistance_attribute("necrotic"), 5)
    assert execution.resistance_value("Damage.Negative", target) == 5


def test_unknown_type_has_no_resistance(execution):
    target, combat = make_asc()
    combat.init(resistance_attribute("fire"), 5)
    assert execution.resistance_value("Damage.Untyped", target) == 0
    assert execution.resistance_value("Damage.Energy.Fire", None) == 0


def test_critical_hit_doubles(execution):
    source, _ = make_asc()
    target, _ = make_asc()
    spec = make_spec(6, "Damage.Physical.Piercing", "Effect.CriticalHit")
    assert execution.is_critical_hit(spec)
    assert execution.execute(spec, source, target)[0][2] == 6 * 2


def test_deadly_bonus_in_die_range():
    execution = DamageExecution(random.Random(7))
    spec = make_spec(6, "Weapon.Trait.Deadly.d10")
    rolls = {execution.deadly_bonus(spec) for _ in range(200)}
    assert min(rolls) >= 1 and max(rolls) <= 10
    assert execution.deadly_bonus(make_spec(6)) == 0.0


def test_crit_with_deadly(execution):
    source, _ = make_asc()
    target, _ = make_asc()
    spec = make_spec(4, "Damage.Physical.Piercing", "Effect.CriticalHit", "Weapon.Trait.Deadly.d6")
    damage = execution.execute(spec, source, target)[0][2]
    assert 4 * 2 + 1 <= damage <= 4 * 2 + 6


def test_damage_type_from_spec(execution):
    spec = make_spec(3, "Effect.CriticalHit", "Damage.Mental", "Damage.Poison")
    assert execution.damage_type_from_spec(spec) == "Damage.Mental"
    assert execution.damage_type_from_spec(make_spec(3, "Effect.CriticalHit")) is None


def test_applied_through_ability_system():
    source, _ = make_asc()
    target, combat = make_asc(health=30.0)
    combat.init(weakness_attribute("slashing"), 2)
    spec = make_spec(8, "Damage.Physical.Slashing")
    spec.execution = DamageExecution(random.Random(0))
    source.apply_effect_spec_to_target(spec, target)
    assert combat.get(HEALTH) == 30.0 - (8 + 2)
    assert combat.get(INCOMING_DAMAGE) == 0.0