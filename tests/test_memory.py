from maildraft.application.memory import MemoryService, extract_style_hint


def test_thread_notes_are_scoped_by_prefix(store):
    memory = MemoryService(store)
    memory.remember_thread_context("t1", "context one")
    memory.remember_draft_pattern("t1", "draft one")
    memory.remember_thread_context("t2", "context two")

    assert sorted(memory.get_thread_notes("t1")) == ["context one", "draft one"]
    assert memory.get_thread_notes("t3") == []


def test_user_preferences(store):
    memory = MemoryService(store)
    memory.remember_user_preference("signoff", "no signoff")
    assert memory.get_user_notes() == ["no signoff"]


def test_learn_from_blank_edit_is_ignored(store):
    memory = MemoryService(store)
    memory.learn_from_edit("t1", "  \n ")
    assert memory.get_thread_notes("t1") == []


def test_style_markers():
    text = "Plan:\n- ship\n- verify\n" + "details " * 40 + "\nLet me know if that works."
    assert extract_style_hint(text) == "Autolearned style markers: structured-list, explicit-follow-up"
    assert extract_style_hint("x" * 300) is None
