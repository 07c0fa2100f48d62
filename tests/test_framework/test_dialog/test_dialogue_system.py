import pytest
from whisper_engine.core.events import DialogueEvent
from whisper_framework.dialog.system import DialogueState

ALL_EVENTS = tuple(DialogueEvent)

@pytest.fixture
def linear_tree(make_tree):
    return make_tree([
        {"id": "a", "text": "First", "next": "b", "on_exit": ["flag:left_a"]},
        {"id": "b", "text": "Second", "next": "c", "on_enter": ["var:visits+1"]},
        {"id": "c", "text": "Last", "end": True, "duration": 2.0},
    ])

@pytest.fixture
def choice_tree(make_tree):
    return make_tree([
        {
            "id": "start",
            "text": "What now?",
            "on_exit": ["flag:answered"],
            "choices": [
                {"text": "Always", "next": "calm"},
                {"text": "Brave", "next": "brave", "condition": "courage >= 10",
                 "impacts": [{"variable": "courage", "change": 5}]},
                {"text": "Hidden", "next": "calm", "condition": "saw_dolls"},
                {"text": "Leave"},
            ],
        },
        {"id": "calm", "text": "Calm.", "end": True},
        {"id": "brave", "text": "Brave.", "end": True},
    ])

def test_linear_flow_to_end(context, linear_tree, recorder):
    events = recorder(context.events, *ALL_EVENTS)
    manager = context.dialogue

    assert manager.start_dialogue(linear_tree)
    assert manager.state == DialogueState.SHOWING_NODE
    assert manager.current_node.id == "a"

    assert manager.advance_to_next_node()
    assert context.store.get_bool("left_a")
    assert manager.current_node.id == "b"
    assert context.store.get_int("visits") == 1

    assert manager.advance_to_next_node()
    assert manager.current_node.id == "c"
    assert manager.is_active

    context.scheduler.update(1.0)
    assert manager.is_active

    context.scheduler.update(1.0)
    assert not manager.is_active
    assert manager.state == DialogueState.ENDED
    assert manager.current_node is None

    ended = [e for e in events if e.type == DialogueEvent.DIALOGUE_ENDED]
    assert len(ended) == 1
    assert ended[0]["tree"] is linear_tree

    context.scheduler.update(10.0)
    assert len([e for e in events if e.type == DialogueEvent.DIALOGUE_ENDED]) == 1

def test_event_order_on_start(context, linear_tree, recorder):
    events = recorder(context.events, *ALL_EVENTS)

    context.dialogue.start_dialogue(linear_tree)

    assert [e.type for e in events] == [
        DialogueEvent.DIALOGUE_STARTED,
        DialogueEvent.NODE_DISPLAYED,
        DialogueEvent.CHOICES_UPDATED,
    ]
    assert events[0]["session_id"] == 1
    assert events[1]["node"].id == "a"
    assert events[2]["count"] == 0

def test_end_node_uses_grace_period(context, make_tree):
    tree = make_tree([{"id": "only", "text": "Bye", "end": True}])
    context.dialogue.start_dialogue(tree)

    context.scheduler.update(context.config.end_node_grace_seconds - 0.5)
    assert context.dialogue.is_active

    context.scheduler.update(0.5)
    assert not context.dialogue.is_active

def test_end_timer_does_not_run_end_commands(context, make_tree):
    tree = make_tree([{"id": "only", "end": True, "duration": 1.0, "on_exit": ["flag:exit_ran"]}])
    context.dialogue.start_dialogue(tree)

    context.scheduler.update(1.0)

    assert not context.dialogue.is_active
    assert not context.store.get_bool("exit_ran")

def test_visible_choices_follow_store(context, choice_tree):
    manager = context.dialogue
    manager.start_dialogue(choice_tree)

    assert [c.text for c in manager.get_visible_choices()] == ["Always", "Leave"]

    context.store.set_int("courage", 10)
    context.store.set_bool("saw_dolls", True)

    assert [c.text for c in manager.get_visible_choices()] == ["Always", "Brave", "Hidden", "Leave"]

def test_choices_updated_reports_visible_count(context, choice_tree, recorder):
    events = recorder(context.events, DialogueEvent.CHOICES_UPDATED)
    context.dialogue.start_dialogue(choice_tree)
    assert events[0]["count"] == 2

def test_select_choice_applies_impacts_and_exit_commands(context, choice_tree, recorder):
    events = recorder(context.events, DialogueEvent.CHOICE_SELECTED, DialogueEvent.IMPACT_APPLIED)
    context.store.set_int("courage", 10)
    manager = context.dialogue
    manager.start_dialogue(choice_tree)

    assert manager.select_choice(1)

    assert manager.current_node.id == "brave"
    assert context.store.get_int("courage") == 15
    assert context.store.get_bool("answered")
    assert events[0].type == DialogueEvent.CHOICE_SELECTED
    assert events[0]["choice"].text == "Brave"
    assert events[1].type == DialogueEvent.IMPACT_APPLIED
    assert events[1]["variable"] == "courage"
    assert events[1]["change"] == 5

def test_index_refers_to_visible_choices(context, choice_tree):
    manager = context.dialogue
    manager.start_dialogue(choice_tree)

    # "Leave" is visible index 1 while Brave and Hidden are hidden
    manager.select_choice(1)

    assert not manager.is_active

def test_out_of_range_index_changes_nothing(context, choice_tree, recorder, caplog):
    manager = context.dialogue
    manager.start_dialogue(choice_tree)
    events = recorder(context.events, *ALL_EVENTS)

    assert not manager.select_choice(2)
    assert not manager.select_choice(-1)

    assert manager.current_node.id == "start"
    assert not context.store.get_bool("answered")
    assert events == []
    assert "Invalid choice index" in caplog.text

def test_choice_without_target_ends_dialogue(context, choice_tree, recorder):
    events = recorder(context.events, DialogueEvent.DIALOGUE_ENDED)
    manager = context.dialogue
    manager.start_dialogue(choice_tree)

    manager.select_choice(1)

    assert not manager.is_active
    assert len(events) == 1

def test_conditional_impact(context, make_tree):
    tree = make_tree([{
        "id": "a",
        "choices": [{
            "text": "go",
            "impacts": [
                {"variable": "trust", "change": 5, "condition": "met_writer"},
                {"variable": "fear", "change": 2, "condition": "!met_writer"},
            ],
        }],
    }])
    context.store.set_bool("met_writer", True)

    context.dialogue.start_dialogue(tree)
    context.dialogue.select_choice(0)

    assert context.store.get_int("trust") == 5
    assert context.store.get_int("fear") == 0

def test_impacts_respect_clamps(context, make_tree):
    tree = make_tree([{
        "id": "a",
        "choices": [{"text": "go", "impacts": [{"variable": "sanity", "change": -500}]}],
    }])
    context.store.set_int("sanity", 30)

    context.dialogue.start_dialogue(tree)
    context.dialogue.select_choice(0)

    assert context.store.get_int("sanity") == 0

def test_advance_refused_with_visible_choices(context, choice_tree):
    manager = context.dialogue
    manager.start_dialogue(choice_tree)

    assert not manager.advance_to_next_node()
    assert manager.current_node.id == "start"

def test_auto_advance_single_choice(context, make_tree):
    tree = make_tree(
        [
            {"id": "a", "choices": [{"text": "Only", "next": "b"}]},
            {"id": "b", "end": True},
        ],
        auto_advance_single_choice=True,
    )
    manager = context.dialogue
    manager.start_dialogue(tree)

    assert manager.advance_to_next_node()
    assert manager.current_node.id == "b"

def test_advance_without_auto_target_ends_and_runs_exit(context, make_tree):
    tree = make_tree([{"id": "a", "end": True, "on_exit": ["flag:exit_ran"]}])
    manager = context.dialogue
    manager.start_dialogue(tree)

    assert manager.advance_to_next_node()

    assert not manager.is_active
    assert context.store.get_bool("exit_ran")

def test_end_node_with_choices_waits(context, make_tree):
    tree = make_tree([
        {"id": "a", "end": True, "choices": [{"text": "again", "next": "a", "condition": "!done"}]},
    ])
    manager = context.dialogue
    manager.start_dialogue(tree)

    context.scheduler.update(100.0)

    assert manager.is_active

def test_missing_target_ends_dialogue(context, make_tree, caplog):
    tree = make_tree([{"id": "a", "choices": [{"text": "go", "next": "ghost"}]}])
    manager = context.dialogue
    manager.start_dialogue(tree)

    manager.select_choice(0)

    assert not manager.is_active
    assert "Dialogue node not found: 'ghost'" in caplog.text

def test_start_null_tree(context, caplog):
    assert not context.dialogue.start_dialogue(None)
    assert "Tried to start a null dialogue tree" in caplog.text
    assert context.dialogue.state == DialogueState.IDLE

def test_start_without_start_node(context, make_tree, caplog):
    tree = make_tree([{"id": "a", "end": True}], start="")
    assert not context.dialogue.start_dialogue(tree)
    assert "has no start node" in caplog.text

def test_start_at_node(context, linear_tree):
    manager = context.dialogue

    assert manager.start_dialogue_at_node(linear_tree, "B")
    assert manager.current_node.id == "b"

    assert not manager.start_dialogue_at_node(linear_tree, "")
    assert not manager.start_dialogue_at_node(linear_tree, "zzz")
    assert manager.current_node.id == "b"

def test_restart_ends_previous_session(context, linear_tree, choice_tree, recorder):
    events = recorder(context.events, DialogueEvent.DIALOGUE_STARTED, DialogueEvent.DIALOGUE_ENDED)
    manager = context.dialogue

    manager.start_dialogue(linear_tree)
    manager.start_dialogue(choice_tree)

    assert [e.type for e in events] == [
        DialogueEvent.DIALOGUE_STARTED,
        DialogueEvent.DIALOGUE_ENDED,
        DialogueEvent.DIALOGUE_STARTED,
    ]
    assert events[1]["tree"] is linear_tree
    assert events[1]["session_id"] == 1
    assert events[2]["session_id"] == 2
    assert manager.current_tree is choice_tree

def test_stale_end_timer_ignored_after_restart(context, make_tree):
    short = make_tree([{"id": "bye", "end": True, "duration": 1.0}], tree_id="short")
    long = make_tree([{"id": "bye", "end": True, "duration": 5.0}], tree_id="long")
    manager = context.dialogue

    manager.start_dialogue(short)
    manager.start_dialogue(long)
    context.scheduler.update(1.0)

    assert manager.is_active
    assert manager.current_tree is long

def test_force_end(context, linear_tree, recorder):
    events = recorder(context.events, DialogueEvent.DIALOGUE_ENDED)
    manager = context.dialogue
    manager.start_dialogue(linear_tree)

    assert manager.force_end()
    assert not manager.force_end()
    assert len(events) == 1

def test_calls_when_inactive(context):
    manager = context.dialogue
    assert manager.get_visible_choices() == []
    assert not manager.select_choice(0)
    assert not manager.advance_to_next_node()

def test_reentrant_start_from_command_is_queued(context, make_tree, recorder):
    second = make_tree([{"id": "x", "text": "Next", "end": True}], tree_id="second")
    first = make_tree(
        [{"id": "a", "text": "First", "end": True, "on_exit": ["chain"]}],
        tree_id="first",
    )
    context.dispatcher.register("chain", lambda ctx, command: ctx.dialogue.start_dialogue(second))
    events = recorder(context.events, DialogueEvent.DIALOGUE_STARTED, DialogueEvent.DIALOGUE_ENDED)
    manager = context.dialogue

    manager.start_dialogue(first)
    manager.advance_to_next_node()

    assert [(e.type, e["tree"].id) for e in events] == [
        (DialogueEvent.DIALOGUE_STARTED, "first"),
        (DialogueEvent.DIALOGUE_ENDED, "first"),
        (DialogueEvent.DIALOGUE_STARTED, "second"),
    ]
    assert manager.current_tree is second

def test_reentrant_select_from_listener_runs_after(context, make_tree):
    tree = make_tree([
        {"id": "a", "choices": [{"text": "go", "next": "b"}]},
        {"id": "b", "choices": [{"text": "go", "next": "c"}]},
        {"id": "c", "end": True},
    ])
    manager = context.dialogue

    def skip_b(event):
        if event["node"].id == "b":
            assert manager.select_choice(0)

    context.events.subscribe(DialogueEvent.NODE_DISPLAYED, skip_b, weak=False)
    manager.start_dialogue(tree)
    manager.select_choice(0)

    assert manager.current_node.id == "c"

def test_failing_command_does_not_break_flow(context, linear_tree):
    def broken(ctx, command):
        raise RuntimeError("boom")

    context.dispatcher.register("flag", broken)
    manager = context.dialogue
    manager.start_dialogue(linear_tree)

    assert manager.advance_to_next_node()
    assert manager.current_node.id == "b"
