import pytest

from phrase_stories.models import PhraseBlock
from phrase_stories.phrase_store import SENTENCE_TRANSLATION_FALLBACK, PhraseStore
from phrase_stories.processing import TextSegmenter
from phrase_stories.storage import PHRASES_KEY, LocalStore


@pytest.fixture
def story():
    store = PhraseStore()
    store.replace_all(TextSegmenter().segment(["小猫", "很", "可爱。", "它", "睡觉了。"]))
    return store


def test_filter_preserves_order(story):
    assert [b.index for b in story.filter_by_sentence(0)] == [0, 1, 2]
    assert [b.index for b in story.filter_by_sentence(1)] == [3, 4]
    assert story.filter_by_sentence(7) == []


def test_counts_and_next_index(story):
    assert len(story) == 5
    assert story.sentence_count == 2
    assert story.next_index == 5
    assert PhraseStore().next_index == 0
    assert PhraseStore().sentence_count == 0


def test_duplicate_indices_rejected():
    store = PhraseStore()
    with pytest.raises(ValueError):
        store.replace_all([PhraseBlock(index=1, language="a"), PhraseBlock(index=1, language="b")])


def test_apply_translation_updates_by_index(story):
    assert story.apply_translation(1, "hěn", "very")

    block = story.get(1)
    assert block.romanization == "hěn"
    assert block.english == "very"
    assert block.language == "很"


def test_apply_translation_unknown_index(story):
    assert not story.apply_translation(99, "x", "y")
    assert all(not b.is_translated for b in story)


def test_sentence_view_brackets_selected_phrase():
    store = PhraseStore()
    store.replace_all([
        PhraseBlock(index=0, language="A", romanization="a", english="x", parent_sentence=0),
        PhraseBlock(index=1, language="B", romanization="b", english="y", parent_sentence=0),
        PhraseBlock(index=2, language="C", romanization="c", english="z", parent_sentence=0),
    ])
    store.apply_sentence_translation(0, "ABC sentence")

    view = store.build_sentence_view(store.get(1))

    assert view.language == "A~[B]~C"
    assert view.romanization == "a~[b]~c"
    assert view.english == "x~[y]~z"
    assert view.english_contextual == "ABC sentence"
    assert view.index == 0
    assert view.parent_sentence == 0


def test_sentence_view_without_translation(story):
    view = story.build_sentence_view(story.get(3))
    assert view.language == "[它]~睡觉了。"
    assert view.english_contextual == SENTENCE_TRANSLATION_FALLBACK


def test_sentence_translation_stamped_on_blocks(story):
    story.apply_sentence_translation(1, "It fell asleep.")

    assert story.sentence_translation(1) == "It fell asleep."
    assert story.sentence_translation(0) is None
    assert {b.english_contextual for b in story.filter_by_sentence(1)} == {"It fell asleep."}
    assert {b.english_contextual for b in story.filter_by_sentence(0)} == {""}


def test_sentence_text(story):
    assert story.sentence_text(0) == "小猫很可爱。"


def test_persist_restore_round_trip(tmp_path, story):
    local = LocalStore(tmp_path)
    store = PhraseStore(local)
    store.replace_all(story.blocks)
    store.apply_translation(0, "xiǎo māo", "kitten")
    store.apply_sentence_translation(0, "The kitten is cute.")
    store.persist()

    restored = PhraseStore(local)
    blocks = restored.restore()

    assert blocks == list(store.blocks)
    assert restored.blocks == store.blocks
    assert restored.sentence_translation(0) == "The kitten is cute."
    assert restored.build_sentence_view(restored.get(2)).english_contextual == "The kitten is cute."


def test_restore_distinguishes_missing_from_empty(tmp_path):
    local = LocalStore(tmp_path)
    store = PhraseStore(local)
    assert store.restore() is None

    store.persist()
    assert PhraseStore(local).restore() == []


def test_restore_ignores_corrupt_snapshot(tmp_path):
    local = LocalStore(tmp_path)
    (tmp_path / f"{PHRASES_KEY}.json").write_text("{not json", encoding="utf-8")

    store = PhraseStore(local)
    assert store.restore() is None
    assert store.is_empty


def test_restore_ignores_wrong_shape(tmp_path):
    local = LocalStore(tmp_path)
    local.save(PHRASES_KEY, {"index": 0})
    assert PhraseStore(local).restore() is None

    local.save(PHRASES_KEY, [{"language": "no index"}])
    assert PhraseStore(local).restore() is None


def test_replace_all_drops_previous_generation(story):
    story.apply_sentence_translation(0, "old")
    story.replace_all(TextSegmenter().segment(["新。"], start_index=5))

    assert [b.index for b in story] == [5]
    assert story.get(0) is None
    assert story.sentence_translation(0) is None
