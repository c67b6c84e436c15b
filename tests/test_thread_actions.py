import pytest

from conftest import FakeProducer, FakeTransport, StaticProducers, make_message
from maildraft.application.use_cases.thread_actions import ThreadService
from maildraft.domain.errors import DraftProducerError, ThreadNotFoundError
from maildraft.domain.models import DraftStatus, MemoryScope


@pytest.fixture
async def synced_thread(make_orchestrator, store):
    orchestrator = make_orchestrator(FakeTransport([make_message(1, "<a@x>")]), FakeProducer())
    await orchestrator.run_once()
    [thread] = store.list_threads_needing_reply()
    return thread


@pytest.fixture
def service_for(store, config, fast_retry):
    def _make(producer):
        return ThreadService(
            store=store,
            producers=StaticProducers(producer),
            config_loader=lambda: config,
            draft_retry=fast_retry,
        )

    return _make


async def test_thread_view(synced_thread, service_for):
    view = service_for(FakeProducer()).get_thread_view(synced_thread.id)
    assert view.thread.id == synced_thread.id
    assert len(view.messages) == 1
    assert view.draft.content == "Thursday works. I'll move it."


async def test_regenerate_passes_instruction(synced_thread, service_for, store):
    producer = FakeProducer(content="Friday instead?")
    content = await service_for(producer).regenerate_draft(synced_thread.id, instruction="propose Friday")

    assert content == "Friday instead?"
    assert producer.requests[0].instruction == "propose Friday"
    assert store.get_draft(synced_thread.id).content == "Friday instead?"
    assert store.get_thread(synced_thread.id).summary == "Friday instead?"


async def test_regenerate_without_content_raises(synced_thread, service_for, store):
    with pytest.raises(DraftProducerError):
        await service_for(FakeProducer(content=None)).regenerate_draft(synced_thread.id)
    assert store.get_draft(synced_thread.id).content == "Thursday works. I'll move it."


async def test_save_edited_draft_learns_style(synced_thread, service_for, store):
    draft = service_for(FakeProducer()).save_edited_draft(synced_thread.id, "Thursday is fine, thanks!")

    assert draft.status == DraftStatus.EDITED
    assert draft.model == "gpt-4o-mini"
    learned = store.get_memory_note(MemoryScope.USER, "style:autolearned")
    assert learned.value == "Autolearned style markers: short-form, polite-close"
    edit = store.get_memory_note(MemoryScope.THREAD, f"{synced_thread.id}:edit")
    assert edit.value.startswith("Edited draft tone sample:")


async def test_skip_and_mark_done(synced_thread, service_for, store):
    service = service_for(FakeProducer())

    assert service.skip_draft(synced_thread.id).status == DraftStatus.SKIPPED
    service.mark_done(synced_thread.id)
    assert store.list_threads_needing_reply() == []


async def test_unknown_thread(service_for):
    service = service_for(FakeProducer())
    with pytest.raises(ThreadNotFoundError):
        service.mark_done("nope")
    with pytest.raises(ThreadNotFoundError):
        await service.regenerate_draft("nope")
