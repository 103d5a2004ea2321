"""Tests for item parsing, the equipment selector and sheet grouping."""

import pytest

from lhtrpg.rules.grouping import monster_skills, organize_items
from lhtrpg.rules.items import (
    EQUIPPABLE_TYPES,
    AccessorySystem,
    BagSystem,
    ItemType,
    ItemValidationError,
    SkillSystem,
    WeaponSystem,
    equipped_items,
    parse_item,
)


class TestParseItem:
    """Tests for building typed items from stored documents."""

    def test_weapon_fields(self):
        item = parse_item(
            "w1",
            "Long Sword",
            "weapon",
            {"accuracy": 1, "mAccuracy": 2, "attack": 8, "equipped": True, "main": True},
        )

        assert item.type == ItemType.WEAPON
        assert isinstance(item.system, WeaponSystem)
        assert item.system.m_accuracy == 2
        assert item.stat("attack") == 8
        assert item.equipped is True

    def test_missing_numbers_default_to_zero(self):
        item = parse_item("a1", "Ring", "accessory", {"equipped": True})

        assert isinstance(item.system, AccessorySystem)
        assert item.stat("magic") == 0
        assert item.stat("pdef") == 0
        assert item.stat("initiative") == 0

    def test_malformed_numbers_become_zero(self):
        item = parse_item(
            "w1",
            "Broken Bow",
            "weapon",
            {"accuracy": None, "attack": "lots", "magic": "3", "restoration": 2.7},
        )

        assert item.stat("accuracy") == 0
        assert item.stat("attack") == 0
        assert item.stat("magic") == 3
        assert item.stat("restoration") == 2

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "1e400", "inf"])
    def test_non_finite_numbers_become_zero(self, value):
        item = parse_item("w1", "Cursed Blade", "weapon", {"attack": value, "equipped": True})
        assert item.stat("attack") == 0

    @pytest.mark.parametrize(("value", "expected"), [("2.5", 2), (2.9, 2), (-1.5, -1), ("4.0", 4)])
    def test_fractions_truncate_toward_zero(self, value, expected):
        item = parse_item("a1", "Charm", "accessory", {"pdef": value})
        assert item.stat("pdef") == expected

    def test_string_flags(self):
        assert parse_item("b1", "Pack", "bag", {"equipped": "true"}).equipped is True
        assert parse_item("b2", "Pack", "bag", {"equipped": "false"}).equipped is False

    def test_bag_space_alias(self):
        item = parse_item("b1", "Backpack", "bag", {"bagSpace": 3})

        assert isinstance(item.system, BagSystem)
        assert item.stat("bag_space") == 3
        assert item.to_system()["bagSpace"] == 3

    def test_field_absent_from_variant(self):
        shield = parse_item("s1", "Buckler", "shield", {"pdef": 2})
        assert shield.stat("attack") == 0

    def test_extra_fields_kept(self):
        item = parse_item("g1", "Rope", "gear", {"price": 5, "description": "Ten metres"})

        assert item.to_system()["price"] == 5
        assert item.to_system()["description"] == "Ten metres"

    def test_skill_has_no_equip_flag(self):
        skill = parse_item("k1", "Taunting Blow", "skill", {"subtype": "Combat", "equipped": False})

        assert isinstance(skill.system, SkillSystem)
        assert skill.is_equippable is False
        assert skill.equipped is False

    def test_unknown_type(self):
        with pytest.raises(ItemValidationError, match="invalid type 'potion'"):
            parse_item("x1", "Potion", "potion", {})

    def test_system_must_be_mapping(self):
        with pytest.raises(ItemValidationError):
            parse_item("x1", "Sword", "weapon", ["not", "a", "dict"])

    def test_carried_needs_explicit_flag(self):
        stored_false = parse_item("w1", "Spare Sword", "weapon", {"equipped": False})
        no_flag = parse_item("w2", "Loose Sword", "weapon", {"accuracy": 1})
        worn = parse_item("w3", "Sword", "weapon", {"equipped": True})
        skill = parse_item("k1", "Taunt", "skill", {"equipped": False})

        assert stored_false.is_carried is True
        assert no_flag.is_carried is False
        assert no_flag.equipped is False
        assert worn.is_carried is False
        assert skill.is_carried is False

    def test_equippable_types(self):
        assert set(EQUIPPABLE_TYPES) == {
            ItemType.WEAPON,
            ItemType.ARMOR,
            ItemType.SHIELD,
            ItemType.ACCESSORY,
            ItemType.BAG,
            ItemType.GEAR,
        }


class TestEquippedItems:
    """Tests for the equipment selector."""

    def test_empty_collection(self):
        assert equipped_items([], ItemType.WEAPON) == []

    def test_filters_by_type_and_flag(self, make_item):
        sword = make_item("weapon", equipped=True)
        spare = make_item("weapon", equipped=False)
        armor = make_item("armor", equipped=True)

        assert equipped_items([sword, spare, armor], ItemType.WEAPON) == [sword]
        assert equipped_items([sword, spare, armor], ItemType.ARMOR) == [armor]
        assert equipped_items([sword, spare, armor], ItemType.BAG) == []

    def test_keeps_collection_order(self, make_item):
        first = make_item("accessory", equipped=True)
        second = make_item("accessory", equipped=True)
        third = make_item("accessory", equipped=True)

        assert equipped_items([third, first, second], ItemType.ACCESSORY) == [
            third,
            first,
            second,
        ]


class TestOrganizeItems:
    """Tests for sheet grouping."""

    def test_groups(self, make_item):
        basic = make_item("skill", subtype="Basic")
        combat = make_item("skill", subtype="Combat")
        general = make_item("skill", subtype="General")
        oddity = make_item("skill", subtype="Secret")
        sword = make_item("weapon", equipped=True)
        spare = make_item("weapon", equipped=False)
        pack = make_item("bag", equipped=False)
        creed = make_item("creed")
        friend = make_item("connection")
        guild = make_item("union")

        groups = organize_items(
            [basic, combat, general, oddity, sword, spare, pack, creed, friend, guild]
        )

        assert groups.skills.basic == [basic]
        assert groups.skills.combat == [combat]
        assert groups.skills.general == [general]
        assert groups.equipped[ItemType.WEAPON] == [sword]
        assert groups.carried[ItemType.WEAPON] == [spare]
        assert groups.carried[ItemType.BAG] == [pack]
        assert groups.equipped[ItemType.GEAR] == []
        assert groups.creeds == [creed]
        assert groups.connections == [friend]
        assert groups.unions == [guild]

    def test_monster_skills(self, make_item):
        bite = make_item("skill", subtype="Combat")
        roar = make_item("skill")
        club = make_item("weapon", equipped=True)

        assert monster_skills([bite, club, roar]) == [bite, roar]
