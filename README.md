# pf2ecombat

A small rules engine for turn-based tabletop combat in the style of
Pathfinder Second Edition. It is a library: there is no command to run.

## What is in it

- `pf2ecombat.combat_library`: `DegreeOfSuccess` and the checks built on it.
  `calculate_degree_of_success(roll, dc, d20_result)` compares a total with a
  DC (10 or more over is a critical success, 10 or more under a critical
  failure), then a natural 20 moves the result one step up and a natural 1 one
  step down. `roll_d20`, `roll_attack`, `roll_save`, `roll_skill_check` and
  `roll_attack_with_penalty` roll a die from 1 to `max_die_roll` (clamped to
  1..20). `calculate_map_penalty(tags, is_agile)` gives the multiple attack
  penalty (5/10, or 4/8 when agile) from the `Conditions.MAP.1` and
  `Conditions.MAP.2` tags. `apply_damage_multiplier` gives none, half, full
  or double damage by the result of a save; `roll_damage` rolls damage dice
  plus a flat bonus; `degree_of_success_string` names a result.
- `pf2ecombat.base`: the building blocks. `Event` (subscribe, unsubscribe,
  broadcast), `TagContainer` and `tag_matches` for dotted gameplay tags,
  `ModOp`, `AttributeSet`, `EffectSpec`, `AbilitySpec` and
  `AbilitySystemComponent`, which holds attribute sets, loose and granted
  tags, granted abilities, and applies effects to itself or to a target.
- `pf2ecombat.combat_attributes`: `CombatAttributeSet` with health, AC,
  saves, actions, reaction, attack and damage data, twelve resistances and
  twelve weaknesses. Health, actions remaining and reaction are clamped when
  changed; incoming damage and incoming healing are folded into health.
- `pf2ecombat.skills_attributes`: `SkillsAttributeSet` with the sixteen core
  skills and a change event for each in `changed_events`.
- `pf2ecombat.spells_attributes`: `SpellsAttributeSet` with spell attack,
  spell save DC (starting at 10), slots for spell levels 1 to 3, divine font
  and focus points; current focus points are kept within 0..max.
- `pf2ecombat.damage_calculation`: `DamageExecution`, which reads the damage
  amount (`Data.Damage`) and damage type tag from an effect, doubles damage on
  `Effect.CriticalHit` and adds a deadly die, subtracts the target's
  resistance, adds its weakness and outputs the result as incoming damage.
- `pf2ecombat.ability`: `GameplayAbility` with its settings (category, action
  cost, range, area, damage dice, deadly trait and more), damage and attack
  rolls, saving throws, the multiple attack penalty tags and
  `apply_damage_to_target`. `AbilityCategory` and `SpellArea` are its enums.
- `pf2ecombat.combatant`: `Combatant`, which owns an ability system component
  and the three attribute sets. `begin_turn` grants 3 actions, or fewer or
  more when stunned, slowed or quickened, and skips the turn when
  incapacitated; `end_turn_effects` cancels active abilities, clears the
  multiple attack penalty and steps clumsy, enfeebled and frightened down one
  level. `CombatStats`, `SkillValues` and `SpellResources` hold starting
  values for `initialize_attributes`; `CombatAttributeType` names the
  attributes `get_combat_attribute` and `set_combat_attribute` accept.

The rolling functions take an optional `random.Random`; `Combatant` and
`GameplayAbility` take one too, so seeded generators give repeatable fights.

## Installation

```
pip install .
```

For the test suite:

```
pip install .[test]
pytest
```

## Examples

```python
import random

from pf2ecombat.combat_library import (
    DegreeOfSuccess,
    calculate_degree_of_success,
    degree_of_success_string,
    roll_attack,
)

# A total of 25 against DC 15 on a natural 14 is a critical success.
result = calculate_degree_of_success(25, 15, 14)
assert result is DegreeOfSuccess.CRITICAL_SUCCESS
print(degree_of_success_string(result))  # "Critical Success"

rng = random.Random(7)
print(roll_attack(7, 18, 20, rng))
```

A turn and a hit:

```python
from pf2ecombat.ability import GameplayAbility
from pf2ecombat.base import EffectSpec
from pf2ecombat.combatant import Combatant, CombatStats, SkillValues, SpellResources
from pf2ecombat.damage_calculation import DamageExecution

fighter = Combatant("Fighter")
goblin = Combatant("Goblin")
for unit in (fighter, goblin):
    unit.initialize_attributes(CombatStats(max_health=20, ac=15), SkillValues(), SpellResources())

fighter.ability_system_component.add_loose_tag("Conditions.Slowed.1")
print(fighter.begin_turn())  # 2

firebolt = GameplayAbility(
    damage_type="Damage.Energy.Fire",
    damage_effect=lambda: EffectSpec(name="damage", execution=DamageExecution()),
)
fighter.ability_system_component.give_ability(firebolt)

goblin.combat_attributes.set("resistance_fire", 3)
firebolt.apply_damage_to_target(goblin, 10)
print(goblin.combat_attributes.get("health"))  # 13.0
```

## What it does not do

There is no battlefield grid, pathfinding, range or area finder, turn order
manager, input handling or user interface here. `GameplayAbility.get_ability_area`
returns only the aimed-at square, `has_line_of_sight` always answers yes, and a
`Combatant` reports spent actions only to a `turn_manager` object you supply
(anything with an `on_action_spent_in_combatant(actions_left)` method).