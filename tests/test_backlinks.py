"""Tests for backlink search."""

import pytest

from notelink import backlinks as backlinks_module
from notelink.backlinks import BacklinkIndex, find_backlinks, find_matches, is_link_to
from notelink.models import Backlink, LinkNode, Match
from notelink.tree import iter_nodes, node_string, resolve_path

from conftest import link, make_note, paragraph, text


def _scenario_notes():
    a = make_note(
        "a",
        "Old",
        {
            "type": "paragraph",
            "children": [
                {"type": "link", "noteId": "b", "noteTitle": "B", "isTextTitle": True, "children": [{"text": "B"}]}
            ],
        },
    )
    b = make_note("b", "B")
    return [a, b]


class TestFindBacklinks:
    def test_single_link_scenario(self):
        result = find_backlinks(_scenario_notes(), "b")

        assert result == [
            Backlink(id="a", title="Old", matches=(Match(context="B", path=(0, 0)),))
        ]

    def test_no_links_returns_empty(self):
        notes = [
            make_note("a", "Alpha", paragraph(text("nothing"))),
            make_note("b", "Beta", paragraph(link("c", "Gamma"))),
        ]

        assert find_backlinks(notes, "zzz") == []

    def test_empty_collection(self):
        assert find_backlinks([], "b") == []

    def test_context_is_parent_text(self):
        notes = [
            make_note("a", "Alpha", paragraph(text("Read "), link("b", "Beta"), text(" first."))),
        ]

        (backlink,) = find_backlinks(notes, "b")

        assert backlink.matches[0].context == "Read Beta first."
        assert backlink.matches[0].path == (0, 1)

    def test_links_with_empty_text_are_ignored(self):
        notes = [make_note("a", "Alpha", paragraph(link("b", "Beta", text(""))))]

        assert find_backlinks(notes, "b") == []

    def test_links_to_other_notes_are_ignored(self):
        notes = [make_note("a", "Alpha", paragraph(link("c", "Gamma"), link("b", "Beta")))]

        (backlink,) = find_backlinks(notes, "b")

        assert [m.path for m in backlink.matches] == [(0, 1)]

    def test_top_level_links_are_not_matched(self):
        # A match needs a parent element to take its context from.
        notes = [make_note("a", "Alpha", link("b", "Beta"))]

        assert find_backlinks(notes, "b") == []

    def test_deeply_nested_link(self):
        notes = [
            make_note(
                "a",
                "Alpha",
                {
                    "type": "bulleted-list",
                    "children": [
                        {"type": "list-item", "children": [paragraph(text("x "), link("b", "Beta"))]},
                    ],
                },
            )
        ]

        (backlink,) = find_backlinks(notes, "b")

        assert backlink.matches == (Match(context="x Beta", path=(0, 0, 0, 1)),)

    def test_links_nested_inside_links_are_found(self):
        inner = link("b", "Inner")
        outer = link("b", "Outer", text("see "), inner)
        notes = [make_note("a", "Alpha", paragraph(outer))]

        (backlink,) = find_backlinks(notes, "b")

        assert [(m.context, m.path) for m in backlink.matches] == [
            ("see Inner", (0, 0)),
            ("see Inner", (0, 0, 1)),
        ]

    def test_order_follows_documents_then_traversal(self):
        notes = [
            make_note("z", "Zed", paragraph(link("b", "Beta"))),
            make_note("a", "Alpha", paragraph(link("b", "Beta")), paragraph(text("x"), link("b", "Beta"))),
        ]

        result = find_backlinks(notes, "b")

        assert [b.id for b in result] == ["z", "a"]
        assert [m.path for m in result[1].matches] == [(0, 0), (1, 1)]

    def test_every_match_path_resolves_to_a_link_to_the_target(self):
        notes = _scenario_notes() + [
            make_note("c", "Gamma", paragraph(text("a "), link("b", "B")), paragraph(link("b", "B"))),
        ]
        by_id = {note.id: note for note in notes}

        for backlink in find_backlinks(notes, "b"):
            for match in backlink.matches:
                node = resolve_path(by_id[backlink.id].content, match.path)
                assert is_link_to(node, "b")

    def test_documents_left_out_have_no_matching_links(self):
        notes = [
            make_note("a", "Alpha", paragraph(link("b", "Beta"))),
            make_note("c", "Gamma", paragraph(link("b", "Beta", text("")))),
            make_note("d", "Delta", paragraph(link("x", "Other"))),
            make_note("e", "Eps", link("b", "Beta")),
        ]

        found = {b.id for b in find_backlinks(notes, "b")}

        for note in notes:
            if note.id in found:
                continue
            for path, node in iter_nodes(note.content):
                if len(path) > 1 and isinstance(node, LinkNode) and node.note_id == "b":
                    assert node_string(node) == ""

    def test_does_not_modify_input(self):
        notes = _scenario_notes()
        before = [note.model_dump() for note in notes]

        find_backlinks(notes, "b")

        assert [note.model_dump() for note in notes] == before


class TestFindMatches:
    def test_matches_on_bare_content(self):
        content = make_note("a", "Alpha", paragraph(link("b", "Beta"))).content

        assert find_matches(content, "b") == [Match(context="Beta", path=(0, 0))]


class TestBacklinkIndex:
    @pytest.fixture
    def counted(self, monkeypatch):
        calls = []
        original = backlinks_module.find_backlinks

        def counting(documents, note_id):
            calls.append(note_id)
            return original(documents, note_id)

        monkeypatch.setattr(backlinks_module, "find_backlinks", counting)
        return calls

    def test_reuses_result_for_same_inputs(self, counted):
        index = BacklinkIndex()
        notes = _scenario_notes()

        first = index.get(notes, "b")
        second = index.get(list(notes), "b")

        assert first == second
        assert counted == ["b"]

    def test_recomputes_when_target_changes(self, counted):
        index = BacklinkIndex()
        notes = _scenario_notes()

        index.get(notes, "b")
        assert index.get(notes, "a") == []
        assert counted == ["b", "a"]

    def test_recomputes_when_documents_change(self, counted):
        index = BacklinkIndex()
        notes = _scenario_notes()
        index.get(notes, "b")

        extra = make_note("c", "Gamma", paragraph(link("b", "B")))
        result = index.get(notes + [extra], "b")

        assert [b.id for b in result] == ["a", "c"]
        assert len(counted) == 2

    def test_invalidate_forces_rescan(self, counted):
        index = BacklinkIndex()
        notes = _scenario_notes()
        index.get(notes, "b")

        index.invalidate()
        index.get(notes, "b")

        assert len(counted) == 2
