"""Core gameplay-ability primitives: events, tags, attribute sets and the ability system."""

from __future__ import annotations

import itertools
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Iterable, Iterator, Mapping

logger = logging.getLogger(__name__)


class Event:
    """A multicast event: every subscribed handler is called on broadcast."""

    def __init__(self) -> None:
        self._handlers: list[Callable[..., Any]] = []

    def subscribe(self, handler: Callable[..., Any]) -> None:
        """Add a handler; a handler already subscribed is not added twice."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: Callable[..., Any]) -> None:
        """Remove a handler; removing one that is not subscribed does nothing."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def broadcast(self, *args: Any) -> None:
        """Call every handler, in subscription order, with the given arguments."""
        for handler in list(self._handlers):
            handler(*args)

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, handler: object) -> bool:
        return handler in self._handlers


def tag_matches(tag: str, parent: str) -> bool:
    """Whether a dotted tag is ``parent`` itself or lies beneath it."""
    if not tag or not parent:
        return False
    return tag == parent or tag.startswith(parent + ".")


class TagContainer:
    """An ordered set of dotted gameplay tags."""

    def __init__(self, tags: Iterable[str] = ()) -> None:
        self._tags: dict[str, None] = dict.fromkeys(tags)

    def add(self, tag: str) -> None:
        self._tags[tag] = None

    def remove(self, tag: str) -> bool:
        """Remove a tag; return whether it was present."""
        return self._tags.pop(tag, False) is None

    def has_tag_exact(self, tag: str) -> bool:
        return tag in self._tags

    def has_tag(self, tag: str) -> bool:
        """Whether any held tag is ``tag`` or a child of it."""
        return any(tag_matches(owned, tag) for owned in self._tags)

    def copy(self) -> "TagContainer":
        return TagContainer(self._tags)

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TagContainer):
            return set(self._tags) == set(other._tags)
        return NotImplemented

    def __repr__(self) -> str:
        return f"TagContainer({list(self._tags)!r})"


class ModOp(Enum):
    """How a modifier combines with an attribute's current value."""

    ADDITIVE = "additive"
    MULTIPLICATIVE = "multiplicative"
    DIVISION = "division"
    OVERRIDE = "override"

    def apply(self, current: float, magnitude: float) -> float:
        if self is ModOp.ADDITIVE:
            return current + magnitude
        if self is ModOp.MULTIPLICATIVE:
            return current * magnitude
        if self is ModOp.DIVISION:
            return current / magnitude if magnitude != 0 else current
        return magnitude


class AttributeSet:
    """A group of named float attributes.

    Subclasses list their attribute names in ``attributes`` and may give
    starting values in ``defaults``; every other attribute starts at 0.
    """

    attributes: ClassVar[tuple[str, ...]] = ()
    defaults: ClassVar[Mapping[str, float]] = {}

    def __init__(self) -> None:
        self._values: dict[str, float] = {
            name: float(self.defaults.get(name, 0.0)) for name in self.attributes
        }

    def _check(self, name: str) -> None:
        if name not in self._values:
            raise KeyError(f"{type(self).__name__} has no attribute {name!r}")

    def get(self, name: str) -> float:
        self._check(name)
        return self._values[name]

    def set(self, name: str, value: float) -> None:
        self._check(name)
        self._values[name] = float(value)

    def init(self, name: str, value: float) -> None:
        """Give an attribute its starting value."""
        self.set(name, value)

    def post_effect_execute(self, attribute: str, magnitude: float) -> None:
        """Hook run after an effect has changed ``attribute`` by ``magnitude``."""

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def as_dict(self) -> dict[str, float]:
        return dict(self._values)


@dataclass
class EffectSpec:
    """A ready-to-apply gameplay effect.

    ``modifiers`` holds ``(attribute, ModOp, magnitude)`` triples. ``execution``,
    if set, is an object whose ``execute(spec, source, target)`` returns further
    triples to apply to the target.
    """

    name: str = ""
    level: float = 1.0
    modifiers: list[tuple[str, ModOp, float]] = field(default_factory=list)
    execution: Any = None
    source_object: Any = None
    granted_tags: TagContainer = field(default_factory=TagContainer)
    dynamic_asset_tags: TagContainer = field(default_factory=TagContainer)
    set_by_caller: dict[str, float] = field(default_factory=dict)

    def set_set_by_caller_magnitude(self, tag: str, value: float) -> None:
        self.set_by_caller[tag] = float(value)

    def get_set_by_caller_magnitude(self, tag: str, default: float = 0.0) -> float:
        return self.set_by_caller.get(tag, default)

    def add_dynamic_asset_tag(self, tag: str) -> None:
        self.dynamic_asset_tags.add(tag)


@dataclass
class AbilitySpec:
    """An ability granted to an ability system, with its handle and state."""

    handle: int
    ability: Any
    level: int = 1
    input_id: int = -1
    active: bool = False


class AbilitySystemComponent:
    """Holds an owner's attribute sets, tags and granted abilities."""

    def __init__(self, owner: Any = None, avatar: Any = None) -> None:
        self.owner = owner
        self.avatar = avatar if avatar is not None else owner
        self._attribute_sets: list[AttributeSet] = []
        self._loose_tags: Counter[str] = Counter()
        self._granted_tags: Counter[str] = Counter()
        self._abilities: dict[int, AbilitySpec] = {}
        self._handles = itertools.count(1)

    @property
    def attribute_sets(self) -> tuple[AttributeSet, ...]:
        return tuple(self._attribute_sets)

    @property
    def activatable_abilities(self) -> tuple[AbilitySpec, ...]:
        return tuple(self._abilities.values())

    def add_attribute_set(self, attribute_set: AttributeSet) -> AttributeSet:
        self._attribute_sets.append(attribute_set)
        return attribute_set

    def _set_for(self, attribute: str) -> AttributeSet:
        for attribute_set in self._attribute_sets:
            if attribute in attribute_set:
                return attribute_set
        raise KeyError(f"no attribute set holds {attribute!r}")

    def get_numeric_attribute(self, attribute: str) -> float:
        return self._set_for(attribute).get(attribute)

    def set_numeric_attribute_base(self, attribute: str, value: float) -> None:
        """Set an attribute directly, without running change hooks."""
        self._set_for(attribute).set(attribute, value)

    def apply_mod_to_attribute(self, attribute: str, op: ModOp, magnitude: float) -> None:
        """Change an attribute as an instant effect would, running its change hook."""
        attribute_set = self._set_for(attribute)
        attribute_set.set(attribute, op.apply(attribute_set.get(attribute), magnitude))
        attribute_set.post_effect_execute(attribute, magnitude)

    def owned_tags(self) -> TagContainer:
        """A snapshot of every tag the owner currently has."""
        owned = TagContainer()
        for counter in (self._loose_tags, self._granted_tags):
            for tag, count in counter.items():
                if count > 0:
                    owned.add(tag)
        return owned

    def add_loose_tag(self, tag: str) -> None:
        self._loose_tags[tag] += 1

    def remove_loose_tag(self, tag: str) -> None:
        if self._loose_tags[tag] > 0:
            self._loose_tags[tag] -= 1
        if self._loose_tags[tag] <= 0:
            del self._loose_tags[tag]

    def give_ability(self, ability: Any) -> int:
        """Grant an ability (an instance, or a class to instantiate); return its handle."""
        if isinstance(ability, type):
            ability = ability()
        handle = next(self._handles)
        self._abilities[handle] = AbilitySpec(handle=handle, ability=ability)
        on_give = getattr(ability, "on_give_ability", None)
        if callable(on_give):
            on_give(self, self.avatar)
        return handle

    def ability_spec(self, handle: int) -> AbilitySpec:
        try:
            return self._abilities[handle]
        except KeyError:
            raise KeyError(f"no ability with handle {handle}") from None

    def activate_ability(self, handle: int) -> bool:
        self.ability_spec(handle).active = True
        return True

    def cancel_ability_handle(self, handle: int) -> None:
        spec = self._abilities.get(handle)
        if spec is not None:
            spec.active = False

    def _apply(self, spec: EffectSpec, target: "AbilitySystemComponent") -> None:
        for tag in spec.granted_tags:
            target._granted_tags[tag] += 1
        for attribute, op, magnitude in spec.modifiers:
            target.apply_mod_to_attribute(attribute, op, magnitude)
        if spec.execution is not None:
            outputs = spec.execution.execute(spec, self, target) or ()
            for attribute, op, magnitude in outputs:
                target.apply_mod_to_attribute(attribute, op, magnitude)
        logger.debug("applied effect %r", spec.name)

    def apply_effect_spec_to_self(self, spec: EffectSpec) -> None:
        self._apply(spec, self)

    def apply_effect_spec_to_target(self, spec: EffectSpec, target: "AbilitySystemComponent") -> None:
        self._apply(spec, target)