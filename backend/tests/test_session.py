import pytest

from course_builder.application.builder.session import EditorSession
from course_builder.application.builder.sync import BuilderSync
from course_builder.domain.exceptions import NodeNotFound, PersistenceError, RevisionConflict
from course_builder.domain.tree import Document
from course_builder.stores.memory import InMemoryContentStore


class SwitchableStore(InMemoryContentStore):
    def __init__(self):
        super().__init__()
        self.down = False
        self.writes = 0

    def set_meta(self, document_id, key, value, expected_revision=None):
        if self.down:
            raise PersistenceError("store unreachable")
        self.writes += 1
        return super().set_meta(document_id, key, value, expected_revision)


@pytest.fixture
def store():
    return SwitchableStore()


@pytest.fixture
def sync(store, registry):
    return BuilderSync(store, registry)


def test_every_mutation_saves(sync, store):
    session = EditorSession.open(sync, "7")

    section = session.add_section()
    widget = session.add_widget("heading", section.id)
    session.update_widget_settings(widget.id, {"text": "Intro"})

    assert store.writes == 3
    reloaded = sync.load("7")
    assert reloaded == session.document
    assert reloaded.sections[0].columns[0].widgets[0].settings == {"text": "Intro"}


def test_add_widget_then_delete_leaves_placeholder_state(sync):
    session = EditorSession.open(sync, "7")
    widget = session.add_widget("heading")

    session.delete_widget(widget.id)

    assert session.is_empty
    reloaded = sync.load("7")
    assert len(reloaded.sections) == 1
    assert reloaded.is_empty


def test_failed_mutation_does_not_save(sync, store):
    session = EditorSession.open(sync, "7")

    with pytest.raises(NodeNotFound):
        session.delete_widget("nope")

    assert store.writes == 0


def test_failed_save_keeps_the_change_for_the_next_save(sync, store):
    session = EditorSession.open(sync, "7")
    store.down = True

    with pytest.raises(PersistenceError):
        session.add_section()

    assert len(session.document.sections) == 1
    assert sync.load("7") == Document()

    store.down = False
    session.add_section()

    assert len(sync.load("7").sections) == 2


def test_reorder_through_session(sync):
    session = EditorSession.open(sync, "7")
    first = session.add_section()
    second = session.add_section()
    a = session.add_widget("text", first.id)
    b = session.add_widget("text", first.id)

    session.reorder_sections([second.id, first.id])
    session.reorder_widgets(first.columns[0].id, [b.id, a.id])

    reloaded = sync.load("7")
    assert [s.id for s in reloaded.sections] == [second.id, first.id]
    assert [w.id for w in reloaded.sections[1].columns[0].widgets] == [b.id, a.id]


def test_session_bound_to_a_revision_detects_concurrent_writes(sync):
    sync.save("7", Document())
    mine = EditorSession.open(sync, "7", expected_revision=1)
    theirs = EditorSession.open(sync, "7", expected_revision=1)

    theirs.add_section()

    with pytest.raises(RevisionConflict):
        mine.add_section()


def test_session_tracks_its_own_revision(sync):
    sync.save("7", Document())
    session = EditorSession.open(sync, "7", expected_revision=1)

    session.add_section()
    session.add_section()

    assert session.revision == 3
    assert session.last_ack.revision == 3


def test_settings_form_reads_current_values(sync):
    session = EditorSession.open(sync, "7")
    widget = session.add_widget("heading")
    session.update_widget_settings(widget.id, {"text": "Hi", "level": "h3"})

    form = {f["name"]: f["value"] for f in session.settings_form(widget.id)}

    assert form["text"] == "Hi"
    assert form["level"] == "h3"
    assert form["text_align"] == "left"
