"""Tests for wargear and princeps trait extraction."""

from titan_catalog.extract.links import CatalogIndex
from titan_catalog.extract.models import Allegiance, TraitGroup, UpgradeGroup
from titan_catalog.extract.traits import TRAITS_ROOT_GROUP_ID, scan_traits, trait_group_kind, trait_name
from titan_catalog.extract.upgrades import scan_upgrades
from titan_catalog.markup import parse

from tests.fixtures.catalog import (
    catalogue,
    chassis_entry,
    entry,
    entry_link,
    group,
    groups,
    rule,
    rules,
)


def _index(*texts):
    return CatalogIndex([parse(t) for t in texts])


def _hidden_for(child_id, scope="ancestor", type_="instanceOf"):
    return (
        '<modifiers><modifier type="set" field="hidden" value="true"><conditions>'
        f'<condition type="{type_}" scope="{scope}" field="selections" childId="{child_id}" value="1"/>'
        "</conditions></modifier></modifiers>"
    )


def _entries(*items):
    return "<selectionEntries>" + "".join(items) + "</selectionEntries>"


class TestUpgrades:
    def _game(self):
        shared = (
            chassis_entry("Warhound Titan", id="wh-1")
            + entry(
                "Machine Spirit Override",
                id="u-1",
                points=20,
                body=rules(rule("Override", "Ignore one order."))
                + _hidden_for("wh-1")
                + _hidden_for("wh-1", scope="parent"),
            )
            + entry("Legio Mortis", id="u-2")
            + entry(
                "Daemonic Blessing",
                id="u-3",
                points=15,
                body='<categoryLinks><categoryLink name="LegioMortis" targetId="c-lm"/>'
                     '<categoryLink name="LegioSpecificWargear" targetId="c-g"/></categoryLinks>',
            )
            + entry("Princeps Seniores", id="2dc5-e9bf-6f6e-39a5", points=25)
        )
        shared_groups = (
            group(
                "Universal Wargear",
                entry_link("u-1"),
                entry_link("u-2"),
                entry_link("missing"),
                id="f360-b4bd-e6cd-d077",
            )
            + group("Traitor Wargear", entry_link("u-3"), id="reissued-id")
        )
        return catalogue(shared=shared, shared_groups=shared_groups)

    def test_listing(self):
        upgrades = scan_upgrades(_index(self._game()))
        assert [u.name for u in upgrades] == [
            "Daemonic Blessing",
            "Machine Spirit Override",
            "Princeps Seniores",
        ]

    def test_fields(self):
        by_name = {u.name: u for u in scan_upgrades(_index(self._game()))}
        override = by_name["Machine Spirit Override"]
        assert override.id == "bsupg:u-1"
        assert override.points == 20
        assert override.rules == ("Override: Ignore one order.",)
        assert override.source_group == UpgradeGroup.UNIVERSAL
        assert override.excluded_titan_template_ids == ("warhound",)

        blessing = by_name["Daemonic Blessing"]
        assert blessing.source_group == UpgradeGroup.TRAITOR
        assert blessing.legio_keys == ("LegioMortis",)

        seniores = by_name["Princeps Seniores"]
        assert seniores.source_group == UpgradeGroup.UNIVERSAL
        assert seniores.rules == ("Princeps Seniores",)

    def test_first_listing_wins(self):
        later = catalogue(
            shared=entry("Machine Spirit Override", id="u-1", points=99),
            shared_groups=group("Loyalist Wargear", entry_link("u-1"), id="c354-c2bb-8d84-0770"),
        )
        upgrades = scan_upgrades(_index(self._game(), later))
        override = next(u for u in upgrades if u.id == "bsupg:u-1")
        assert override.points == 20
        assert override.source_group == UpgradeGroup.UNIVERSAL

    def test_no_groups(self):
        assert scan_upgrades(_index(catalogue(shared=entry("Lone Upgrade", id="x")))) == []


class TestTraits:
    def _game(self, root_id=TRAITS_ROOT_GROUP_ID, root_name="Princeps Traits"):
        standard = group(
            "Standard",
            body=_entries(
                entry("01 Ambitious", id="t-1", body=rules(rule("Ambitious", "Seek glory.")))
                + entry("Nameless Trait")
            ),
        )
        mortis = group(
            "Legio Mortis",
            body=(
                '<modifiers><modifier type="set" field="hidden" value="false"><conditions>'
                '<condition type="atLeast" scope="primary-category" field="selections" childId="c-lm" value="1"/>'
                "</conditions></modifier></modifiers>"
                + _entries(entry("Dead Eyed", id="t-2"))
            ),
        )
        corrupted = group("Corrupted Titan", body=_entries(entry("Warp Touched", id="t-3")))
        root = group(root_name, id=root_id, body=groups(standard, mortis, corrupted))
        return catalogue(shared_groups=root)

    def test_traits(self):
        traits = scan_traits(_index(self._game()))
        assert [(t.id, t.name, t.trait_group) for t in traits] == [
            ("bstrait:t-1", "Ambitious", TraitGroup.STANDARD),
            ("bstrait:t-2", "Dead Eyed", TraitGroup.LEGIO),
            ("bstrait:t-3", "Warp Touched", TraitGroup.CORRUPTED),
        ]

    def test_rules_and_categories(self):
        by_id = {t.id: t for t in scan_traits(_index(self._game()))}
        assert by_id["bstrait:t-1"].rules == ("Ambitious: Seek glory.",)
        assert by_id["bstrait:t-1"].legio_category_id is None
        assert by_id["bstrait:t-2"].rules == ("Dead Eyed",)
        assert by_id["bstrait:t-2"].legio_category_id == "c-lm"
        assert by_id["bstrait:t-2"].allegiance == Allegiance.UNKNOWN

    def test_root_found_by_name(self):
        traits = scan_traits(_index(self._game(root_id="new-id", root_name="Princeps Traits (HH)")))
        assert len(traits) == 3

    def test_no_root(self):
        assert scan_traits(_index(catalogue(shared=entry("Ambitious", id="t-1")))) == []

    def test_group_kinds(self):
        assert trait_group_kind("Standard") == TraitGroup.STANDARD
        assert trait_group_kind("Legio Astorum") == TraitGroup.LEGIO
        assert trait_group_kind("Something Else") == TraitGroup.UNKNOWN

    def test_trait_name_prefix(self):
        assert trait_name("03 Cunning") == "Cunning"
        assert trait_name("Cunning 03") == "Cunning 03"
