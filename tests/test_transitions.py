"""Tests for the pure asset store transitions"""

import pytest

from caption_studio.models.media import Asset, MediaKind
from caption_studio.store import transitions
from caption_studio.store.state import StoreState, active_asset, selected_assets


def _asset(asset_id: str, make_media_file) -> Asset:
    source = make_media_file(f"{asset_id}.jpg", "image/jpeg")
    return Asset(
        id=asset_id,
        source=source,
        preview_url=source.preview_url,
        media_kind=MediaKind.IMAGE,
        poster_url=source.preview_url,
    )


@pytest.fixture
def three_assets(make_media_file):
    state = transitions.ingest_assets(
        StoreState(), [_asset(i, make_media_file) for i in ("a", "b", "c")]
    )
    return state


class TestIngest:
    def test_appends_in_order_and_selects_first(self, three_assets):
        assert list(three_assets.assets) == ["a", "b", "c"]
        assert three_assets.active_id == "a"
        assert three_assets.selected_ids == ("a",)

    def test_new_batch_replaces_prior_selection(self, three_assets, make_media_file):
        state = transitions.toggle_selection(three_assets, "b", additive=True)
        state = transitions.ingest_assets(state, [_asset("d", make_media_file), _asset("e", make_media_file)])

        assert state.active_id == "d"
        assert state.selected_ids == ("d",)
        assert list(state.assets) == ["a", "b", "c", "d", "e"]

    def test_empty_batch_is_noop(self, three_assets):
        assert transitions.ingest_assets(three_assets, []) is three_assets

    def test_duplicate_id_rejected(self, three_assets, make_media_file):
        with pytest.raises(ValueError):
            transitions.ingest_assets(three_assets, [_asset("a", make_media_file)])

    def test_does_not_mutate_previous_snapshot(self, three_assets, make_media_file):
        transitions.ingest_assets(three_assets, [_asset("z", make_media_file)])
        assert "z" not in three_assets.assets

    def test_snapshot_mapping_is_read_only(self, three_assets):
        with pytest.raises(TypeError):
            three_assets.assets["x"] = three_assets.assets["a"]


class TestToggleSelection:
    def test_non_additive_on_sole_selected_deselects_but_stays_active(self, three_assets):
        state = transitions.toggle_selection(three_assets, "a", additive=False)
        assert state.selected_ids == ()
        assert state.active_id == "a"

    def test_non_additive_replaces_selection(self, three_assets):
        state = transitions.toggle_selection(three_assets, "a", additive=True)  # deselect a
        state = transitions.toggle_selection(state, "b", additive=True)
        state = transitions.toggle_selection(state, "c", additive=True)
        state = transitions.toggle_selection(state, "a", additive=False)

        assert state.selected_ids == ("a",)
        assert state.active_id == "a"

    def test_non_additive_on_member_of_larger_selection_selects_only_it(self, three_assets):
        state = transitions.toggle_selection(three_assets, "b", additive=True)
        state = transitions.toggle_selection(state, "b", additive=False)
        assert state.selected_ids == ("b",)

    def test_additive_adds_without_touching_others(self, three_assets):
        state = transitions.toggle_selection(three_assets, "c", additive=True)
        assert state.selected_ids == ("a", "c")
        assert state.active_id == "c"

    def test_additive_removes_without_touching_others(self, three_assets):
        state = transitions.toggle_selection(three_assets, "b", additive=True)
        state = transitions.toggle_selection(state, "c", additive=True)
        state = transitions.toggle_selection(state, "b", additive=True)
        assert state.selected_ids == ("a", "c")
        assert state.active_id == "b"


class TestCaptions:
    def test_merge_replaces_whole_set(self, three_assets, make_caption_set):
        state = transitions.merge_captions(three_assets, "a", make_caption_set("gen1"))
        state = transitions.merge_captions(state, "a", make_caption_set("gen2"))

        captions = state.assets["a"].captions
        assert captions == make_caption_set("gen2")
        assert state.assets["b"].captions is None

    def test_merge_on_absent_asset_is_noop(self, three_assets, make_caption_set):
        assert transitions.merge_captions(three_assets, "nope", make_caption_set()) is three_assets

    def test_edit_changes_only_text_of_one_slot(self, three_assets, make_caption_set):
        before = transitions.merge_captions(three_assets, "a", make_caption_set())
        after = transitions.edit_caption_text(before, "a", "short", "New text")

        old, new = before.assets["a"].captions, after.assets["a"].captions
        assert new.short.text == "New text"
        assert new.short.id == old.short.id
        assert new.seo_title == old.seo_title
        assert new.long == old.long
        assert new.hashtags == old.hashtags
        assert old.short.text == "gen1 short"

    def test_edit_without_captions_is_noop(self, three_assets):
        assert transitions.edit_caption_text(three_assets, "a", "short", "x") is three_assets

    def test_edit_absent_asset_is_noop(self, three_assets):
        assert transitions.edit_caption_text(three_assets, "nope", "long", "x") is three_assets

    def test_edit_unknown_slot_raises(self, three_assets, make_caption_set):
        state = transitions.merge_captions(three_assets, "a", make_caption_set())
        with pytest.raises(ValueError):
            transitions.edit_caption_text(state, "a", "title", "x")


class TestBusyAndErrors:
    def test_busy_counter_spans_overlapping_batches(self):
        state = transitions.begin_busy(transitions.begin_busy(StoreState()))
        state = transitions.end_busy(state)
        assert state.is_loading
        assert not transitions.end_busy(state).is_loading

    def test_end_busy_never_goes_negative(self):
        assert transitions.end_busy(StoreState()).busy_count == 0

    def test_error_set_and_dismissed(self):
        state = transitions.set_error(StoreState(), "boom")
        assert state.error == "boom"
        assert transitions.dismiss_error(state).error is None


class TestSelectors:
    def test_selected_assets_prunes_missing_ids(self, three_assets):
        state = StoreState(
            assets=three_assets.assets,
            selected_ids=("ghost", "b", "a"),
            active_id="ghost",
        )
        assert [a.id for a in selected_assets(state)] == ["b", "a"]
        assert active_asset(state) is None

    def test_active_asset(self, three_assets):
        assert active_asset(three_assets).id == "a"
        assert active_asset(StoreState()) is None


def test_toggle_unknown_id_is_noop(three_assets):
    assert transitions.toggle_selection(three_assets, "ghost", additive=True) is three_assets
