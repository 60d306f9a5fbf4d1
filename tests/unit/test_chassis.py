"""Tests for chassis discovery, formations and legions."""

from titan_catalog.extract.chassis import chassis_from_entry, legend_titans, scan_chassis
from titan_catalog.extract.formations import group_min_max, scan_formations
from titan_catalog.extract.legions import allegiance_for_publication, scan_legions
from titan_catalog.extract.links import CatalogIndex
from titan_catalog.extract.models import Allegiance, MountType
from titan_catalog.markup import parse

from tests.fixtures.catalog import (
    catalogue,
    chassis_entry,
    entry,
    entry_link,
    group,
    groups,
    reaver_catalogue,
    rule,
    rules,
)


def _index(*texts):
    return CatalogIndex([parse(t) for t in texts])


def _category(name, target_id):
    return f'<categoryLinks><categoryLink name="{name}" targetId="{target_id}"/></categoryLinks>'


class TestChassisFromEntry:
    def test_reaver(self):
        found = scan_chassis(_index(reaver_catalogue()))
        assert list(found) == ["reaver"]
        reaver = found["reaver"]
        assert reaver.name == "Reaver Titan"
        assert reaver.points == 240
        assert reaver.maxima.void_shields == 5
        assert reaver.maxima.plasma_reactor is None
        assert reaver.maxima.max_heat is None
        assert reaver.default_left_weapon_id == "bs:w-volcano"
        assert reaver.default_right_weapon_id is None
        assert [(w.id, w.mount_type) for w in reaver.weapons] == [
            ("bs:w-volcano", MountType.ARM),
            ("bs:w-gatling", MountType.CARAPACE),
        ]
        assert reaver.rules == ["Reaver Protocols: The Reaver may re-roll one hit."]
        assert not reaver.is_legend

    def test_weapon_entries_are_not_chassis(self):
        found = scan_chassis(_index(reaver_catalogue()))
        assert "bs:w-volcano" not in found

    def test_non_chassis_returns_none(self):
        doc = parse(catalogue(shared=entry("Reaver Wargear", type_="unit")))
        index = CatalogIndex([doc])
        node = doc.children[0].children[1].children[0]
        assert chassis_from_entry(node, index.for_document(doc)) is None

    def test_heat_defaults_to_reactor(self):
        titan = chassis_entry("Warhound Titan", chars={"Void Shields": "2", "Plasma Reactor": "4"})
        warhound = scan_chassis(_index(catalogue(shared=titan)))["warhound"]
        assert warhound.maxima.plasma_reactor == 4
        assert warhound.maxima.max_heat == 4

    def test_legend_titans(self):
        text = catalogue(shared=(
            chassis_entry("Warlord Titan", chars={"Void Shields": "6"})
            + chassis_entry("Reaver Titan of Legend", id="leg-1")
        ))
        found = scan_chassis(_index(text))
        assert found["reaver"].is_legend
        assert [(t.id, t.name) for t in legend_titans(found)] == [("reaver", "Reaver Titan of Legend")]


class TestChassisMerge:
    FIRST = catalogue(shared=chassis_entry(
        "Reaver Titan", id="r-a", chars={"Void Shields": "5"},
        body=rules(rule("Shared", "Same text.")),
    ))
    SECOND = catalogue(shared=chassis_entry(
        "Reaver Titan", id="r-b", chars={"Void Shields": "3", "Plasma Reactor": "6"}, points=250,
        body=rules(rule("Shared", "Same text."), rule("Extra", "More.")),
    ))

    def test_first_seen_values_win(self):
        reaver = scan_chassis(_index(self.FIRST, self.SECOND))["reaver"]
        assert reaver.maxima.void_shields == 5
        assert reaver.maxima.plasma_reactor == 6
        assert reaver.points == 250
        assert reaver.rules == ["Shared: Same text.", "Extra: More."]

    def test_file_order_decides(self):
        reaver = scan_chassis(_index(self.SECOND, self.FIRST))["reaver"]
        assert reaver.maxima.void_shields == 3

    def test_merge_is_deterministic(self):
        first = scan_chassis(_index(self.FIRST, self.SECOND))
        second = scan_chassis(_index(self.FIRST, self.SECOND))
        assert first == second


class TestFormations:
    TITANS = (
        chassis_entry("Reaver Titan", id="r-1")
        + chassis_entry("Warhound Titan", id="wh-1")
    )

    def test_direct_slots(self):
        formation = entry(
            "Axiom Battleline Maniple",
            id="m-1",
            body=(
                "<entryLinks>"
                + entry_link("r-1", min=1, max=2)
                + entry_link("wh-1", min=0, max=2)
                + entry_link("upgrade-1", min=1, max=1)
                + "</entryLinks>"
                + rules(rule("Battleline", "Titans in this maniple move together."))
            ),
        )
        (result,) = scan_formations(_index(catalogue(shared=self.TITANS + formation)))
        assert result.id == "bsmaniple:m-1"
        assert result.allowed_titan_template_ids == ("reaver", "warhound")
        assert (result.min_titans, result.max_titans) == (1, 4)
        assert result.special_rule == "Titans in this maniple move together."

    def test_group_fallback(self):
        formation = entry(
            "Myrmidon Battle Maniple",
            id="m-2",
            body=groups(group(
                "Core",
                entry_link("shared-titans"),
                min=2,
                max=3,
            )),
        )
        shared_groups = group(
            "Titans",
            entry_link("r-1"),
            entry_link("wh-1"),
            id="shared-titans",
        )
        (result,) = scan_formations(_index(catalogue(
            shared=self.TITANS + formation, shared_groups=shared_groups,
        )))
        assert result.allowed_titan_template_ids == ("reaver", "warhound")
        assert (result.min_titans, result.max_titans) == (2, 3)
        assert result.special_rule == "Myrmidon Battle Maniple: (BattleScribe)"

    def test_merges_and_sorts(self):
        first = entry("Venator Light Maniple", id="m-1",
                      body="<entryLinks>" + entry_link("wh-1", min=1, max=1) + "</entryLinks>")
        second = entry("Venator Light Maniple", id="m-1",
                       body="<entryLinks>" + entry_link("r-1", min=1, max=2) + "</entryLinks>")
        other = entry("Axiom Maniple", id="m-9")
        results = scan_formations(_index(
            catalogue(shared=self.TITANS + first + other),
            catalogue(shared=self.TITANS + second),
        ))
        assert [f.name for f in results] == ["Axiom Maniple", "Venator Light Maniple"]
        venator = results[1]
        assert venator.allowed_titan_template_ids == ("warhound", "reaver")
        assert (venator.min_titans, venator.max_titans) == (1, 1)

    def test_stratagem_names_skipped(self):
        text = catalogue(shared=entry("Maniple Stratagems", id="s-1"))
        assert scan_formations(_index(text)) == []


class TestGroupMinMax:
    def test_group_constraints_win(self):
        node = parse(group("Core", entry_link("a", min=9, max=9), min=1, max=2)).children[0]
        assert group_min_max(node) == (1, 2)

    def test_link_constraints_used(self):
        node = parse(group("Core", entry_link("a", max=2))).children[0]
        assert group_min_max(node) == (0, 2)

    def test_missing_max_equals_min(self):
        node = parse(group("Core", min=3)).children[0]
        assert group_min_max(node) == (3, 3)

    def test_zero_max_raised_to_one(self):
        node = parse(group("Core")).children[0]
        assert group_min_max(node) == (0, 1)

    def test_fractions_floor(self):
        node = parse(group("Core", min=1.5, max=2.9)).children[0]
        assert group_min_max(node) == (1, 2)


class TestLegions:
    def test_legion_fields(self):
        mortis = entry(
            "Legio Mortis",
            id="lm",
            publicationId="bf8b-27d7-039e-5df9",
            body=_category("LegioSpecificWargear", "c-generic")
            + _category("LegioMortis", "c-lm")
            + rules(rule("Death's Heads", "Fear them.")),
        )
        (legion,) = scan_legions(_index(catalogue(shared=mortis)))
        assert legion.id == "bslegio:lm"
        assert legion.name == "Legio Mortis"
        assert legion.allegiance == Allegiance.TRAITOR
        assert (legion.category_key, legion.category_id) == ("LegioMortis", "c-lm")
        assert legion.rules == ("Death's Heads: Fear them.",)

    def test_filters_and_order(self):
        text = catalogue(shared=(
            entry("Legio Tempestus", id="lt")
            + entry("Legio Astorum", id="la", publicationId="3401-191e-1333-8a1d")
            + entry("Legio Gryphonicus", id="lg", type_="unit")
            + entry("Princeps Seniores", id="ps")
        ))
        legions = scan_legions(_index(text))
        assert [l.name for l in legions] == ["Legio Astorum", "Legio Tempestus"]
        assert legions[0].allegiance == Allegiance.LOYALIST
        assert legions[1].allegiance == Allegiance.UNKNOWN
        assert legions[1].category_key is None

    def test_first_entry_per_id_wins(self):
        results = scan_legions(_index(
            catalogue(shared=entry("Legio Ignatum", id="li", body=rules(rule("A", "first")))),
            catalogue(shared=entry("Legio Ignatum", id="li", body=rules(rule("B", "second")))),
        ))
        assert len(results) == 1
        assert results[0].rules == ("A: first",)

    def test_unknown_publication(self):
        assert allegiance_for_publication("") == Allegiance.UNKNOWN
        assert allegiance_for_publication(" bf8b-27d7-039e-5df9 ") == Allegiance.TRAITOR
