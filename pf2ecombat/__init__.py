"""Turn-based tabletop combat rules: checks, attributes, damage, abilities and combatants."""

__version__ = "0.1.0"
__all__ = [
    "base",
    "combat_library",
    "combat_attributes",
    "skills_attributes",
    "spells_attributes",
    "damage_calculation",
    "ability",
    "combatant",
]