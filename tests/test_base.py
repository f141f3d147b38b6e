import pytest

from pf2ecombat.base import (
    AbilitySpec,
    AbilitySystemComponent,
    AttributeSet,
    EffectSpec,
    Event,
    ModOp,
    TagContainer,
    tag_matches,
)


class RecordingSet(AttributeSet):
    attributes = ("health", "armor")
    defaults = {"armor": 10.0}

    def __init__(self):
        super().__init__()
        self.calls = []

    def post_effect_execute(self, attribute, magnitude):
        self.calls.append((attribute, magnitude))


class OtherSet(AttributeSet):
    attributes = ("stealth",)


class Ability:
    def __init__(self):
        self.given = None

    def on_give_ability(self, asc, owner):
        self.given = (asc, owner)


class FlatExecution:
    def __init__(self, amount):
        self.amount = amount
        self.seen = None

    def execute(self, spec, source, target):
        self.seen = (spec, source, target)
        return [("health", ModOp.ADDITIVE, -self.amount)]


def make_asc(owner="hero"):
    asc = AbilitySystemComponent(owner)
    asc.add_attribute_set(RecordingSet())
    asc.add_attribute_set(OtherSet())
    return asc


def test_event_broadcast_order_and_unsubscribe():
    received = []
    event = Event()
    first = lambda a, b: received.append(("first", a, b))
    second = lambda a, b: received.append(("second", a, b))
    event.subscribe(first)
    event.subscribe(second)
    event.subscribe(first)
    assert len(event) == 2
    event.broadcast(1.0, 2.0)
    assert received == [("first", 1.0, 2.0), ("second", 1.0, 2.0)]
    event.unsubscribe(first)
    event.unsubscribe(first)
    received.clear()
    event.broadcast(3.0, 4.0)
    assert received == [("second", 3.0, 4.0)]
    assert first not in event


def test_tag_matches_hierarchy():
    assert tag_matches("Damage.Energy.Fire", "Damage")
    assert tag_matches("Damage", "Damage")
    assert not tag_matches("DamageX.Fire", "Damage")
    assert not tag_matches("Damage", "Damage.Energy")
    assert not tag_matches("", "Damage")


def test_tag_container_exact_and_parent():
    tags = TagContainer(["Conditions.MAP.1", "Damage.Force"])
    assert tags.has_tag_exact("Conditions.MAP.1")
    assert not tags.has_tag_exact("Conditions.MAP")
    assert tags.has_tag("Conditions.MAP")
    assert tags.has_tag("Damage")
    assert not tags.has_tag("Weapon")
    assert tags.remove("Damage.Force") is True
    assert tags.remove("Damage.Force") is False
    assert list(tags) == ["Conditions.MAP.1"]


def test_tag_container_keeps_insertion_order():
    tags = TagContainer()
    for tag in ("Effect.CriticalHit", "Damage.Poison", "Weapon.Trait.Deadly.d8"):
        tags.add(tag)
    assert list(tags) == ["Effect.CriticalHit", "Damage.Poison", "Weapon.Trait.Deadly.d8"]
    assert tags.copy() == tags


def test_attribute_set_defaults_and_unknown_names():
    asc = make_asc()
    attrs = asc.attribute_sets[0]
    assert asc.get_numeric_attribute("health") == 0.0
    assert asc.get_numeric_attribute("armor") == 10.0
    attrs.init("health", 25)
    assert asc.get_numeric_attribute("health") == 25.0
    assert attrs.as_dict() == {"health": 25.0, "armor": 10.0}
    with pytest.raises(KeyError):
        attrs.get("mana")
    with pytest.raises(KeyError):
        attrs.set("mana", 1)


def test_set_numeric_attribute_base_skips_hook():
    asc = make_asc()
    asc.set_numeric_attribute_base("health", 30)
    assert asc.get_numeric_attribute("health") == 30.0
    assert asc.attribute_sets[0].calls == []


def test_apply_mod_override_runs_hook_with_magnitude():
    asc = make_asc()
    asc.apply_mod_to_attribute("health", ModOp.OVERRIDE, 12.0)
    assert asc.get_numeric_attribute("health") == 12.0
    assert asc.attribute_sets[0].calls == [("health", 12.0)]


@pytest.mark.parametrize(
    "op, magnitude, expected",
    [
        (ModOp.ADDITIVE, 5.0, 15.0),
        (ModOp.MULTIPLICATIVE, 2.0, 20.0),
        (ModOp.DIVISION, 0.0, 10.0),
    ],
)
def test_apply_mod_ops(op, magnitude, expected):
    asc = make_asc()
    asc.apply_mod_to_attribute("armor", op, magnitude)
    assert asc.get_numeric_attribute("armor") == expected


def test_attribute_lookup_spans_sets_and_rejects_unknown():
    asc = make_asc()
    asc.apply_mod_to_attribute("stealth", ModOp.OVERRIDE, 7.0)
    assert asc.get_numeric_attribute("stealth") == 7.0
    with pytest.raises(KeyError):
        asc.get_numeric_attribute("nonexistent")


def test_loose_tags_are_counted():
    asc = make_asc()
    asc.add_loose_tag("Conditions.Stunned.1")
    asc.add_loose_tag("Conditions.Stunned.1")
    asc.remove_loose_tag("Conditions.Stunned.1")
    assert asc.owned_tags().has_tag_exact("Conditions.Stunned.1")
    asc.remove_loose_tag("Conditions.Stunned.1")
    asc.remove_loose_tag("Conditions.Stunned.1")
    assert not asc.owned_tags().has_tag_exact("Conditions.Stunned.1")


def test_owned_tags_is_a_snapshot():
    asc = make_asc()
    asc.add_loose_tag("Conditions.MAP.1")
    snapshot = asc.owned_tags()
    asc.remove_loose_tag("Conditions.MAP.1")
    assert snapshot.has_tag_exact("Conditions.MAP.1")
    assert len(asc.owned_tags()) == 0


def test_give_activate_and_cancel_ability():
    asc = make_asc("owner")
    ability = Ability()
    handle = asc.give_ability(ability)
    assert ability.given == (asc, "owner")
    spec = asc.ability_spec(handle)
    assert isinstance(spec, AbilitySpec) and spec.ability is ability
    assert spec.level == 1
    assert spec.active is False
    assert asc.activate_ability(handle) is True
    assert [s.handle for s in asc.activatable_abilities if s.active] == [handle]
    asc.cancel_ability_handle(handle)
    assert not asc.ability_spec(handle).active
    with pytest.raises(KeyError):
        asc.activate_ability(handle + 100)


def test_give_ability_instantiates_classes_with_distinct_handles():
    asc = make_asc()
    first = asc.give_ability(Ability)
    second = asc.give_ability(Ability)
    assert first != second
    assert isinstance(asc.ability_spec(first).ability, Ability)


def test_effect_spec_set_by_caller_and_tags():
    spec = EffectSpec(name="hit")
    assert spec.get_set_by_caller_magnitude("Data.Damage", -1.0) == -1.0
    spec.set_set_by_caller_magnitude("Data.Damage", 8)
    assert spec.get_set_by_caller_magnitude("Data.Damage", -1.0) == 8.0
    spec.add_dynamic_asset_tag("Effect.CriticalHit")
    assert spec.dynamic_asset_tags.has_tag_exact("Effect.CriticalHit")


def test_apply_effect_to_self_modifiers_and_granted_tags():
    asc = make_asc()
    spec = EffectSpec(
        modifiers=[("armor", ModOp.OVERRIDE, 3.0)],
        granted_tags=TagContainer(["Conditions.Quickened"]),
    )
    asc.apply_effect_spec_to_self(spec)
    assert asc.get_numeric_attribute("armor") == 3.0
    assert asc.owned_tags().has_tag_exact("Conditions.Quickened")


def test_apply_effect_to_target_runs_execution():
    source = make_asc("source")
    target = make_asc("target")
    target.set_numeric_attribute_base("health", 20)
    execution = FlatExecution(6)
    spec = EffectSpec(execution=execution)
    source.apply_effect_spec_to_target(spec, target)
    assert execution.seen == (spec, source, target)
    assert target.get_numeric_attribute("health") == 20 - 6
    assert source.get_numeric_attribute("health") == 0.0
    assert target.attribute_sets[0].calls == [("health", -6)]