import pytest
from whisper_framework.state.store import StoreSnapshot, VariableStore

def test_unset_keys_return_zero_values():
    store = VariableStore()
    assert store.get_bool("never_set") is False
    assert store.get_int("never_set") == 0
    assert store.get_string("never_set") == ""

def test_keys_are_case_insensitive():
    store = VariableStore()
    store.set_bool("Saw_Dolls", True)
    store.set_int("  Courage ", 5)

    assert store.get_bool("saw_dolls")
    assert store.get_int("COURAGE") == 5

def test_add_int_accumulates():
    store = VariableStore()
    store.add_int("courage", 10)
    store.add_int("courage", -3)
    assert store.get_int("courage") == 7

def test_add_then_subtract_restores_value(store):
    store.set_int("courage", 12)
    store.add_int("courage", 5)
    store.add_int("courage", -5)
    assert store.get_int("courage") == 12

def test_has_int_tracks_assignment():
    store = VariableStore()
    assert not store.has_int("courage")

    store.set_int("Courage", 0)
    assert store.has_int("courage")

def test_sanity_is_clamped(store):
    store.set_int("sanity", 150)
    assert store.get_int("sanity") == 100

    store.add_int("sanity", -500)
    assert store.get_int("sanity") == 0

def test_unclamped_int_can_go_negative(store):
    store.add_int("courage", -5)
    assert store.get_int("courage") == -5

def test_toggle_bool():
    store = VariableStore()
    store.toggle_bool("lamp")
    assert store.get_bool("lamp")
    store.toggle_bool("lamp")
    assert not store.get_bool("lamp")

def test_empty_key_is_rejected(caplog):
    store = VariableStore()
    store.set_bool("", True)
    store.set_int("   ", 3)

    assert store.flags == {}
    assert store.ints == {}
    assert "empty variable key" in caplog.text

def test_change_signals_fire_with_normalized_key():
    store = VariableStore()
    received = []
    store.on_int_changed.subscribe(lambda key, value: received.append((key, value)))
    store.on_bool_changed.subscribe(lambda key, value: received.append((key, value)))
    store.on_string_changed.subscribe(lambda key, value: received.append((key, value)))

    store.add_int("Courage", 4)
    store.set_bool("Met_Writer", True)
    store.set_string("Ending", "listener")

    assert received == [("courage", 4), ("met_writer", True), ("ending", "listener")]

def test_unsubscribed_callback_not_called():
    store = VariableStore()
    received = []
    subscription = store.on_bool_changed.subscribe(lambda key, value: received.append(key))
    subscription.unsubscribe()

    store.set_bool("flag", True)

    assert received == []

def test_clear_all_reapplies_defaults():
    store = VariableStore(int_defaults={"sanity": 100}, bool_defaults={"awake": True})
    store.set_int("sanity", 40)
    store.set_bool("met_writer", True)

    store.clear_all()

    assert store.get_int("sanity") == 100
    assert store.get_bool("awake")
    assert not store.get_bool("met_writer")

def test_defaults_do_not_emit_signals():
    store = VariableStore(int_defaults={"sanity": 100})
    received = []
    store.on_int_changed.subscribe(lambda key, value: received.append(key))

    store.clear_all()

    assert received == []

def test_snapshot_and_restore():
    store = VariableStore()
    store.set_bool("door_open", True)
    store.set_int("courage", 20)
    store.set_string("ending", "gate")

    snapshot = store.snapshot()
    store.clear_all()
    store.set_int("courage", 1)
    store.restore(snapshot)

    assert store.get_bool("door_open")
    assert store.get_int("courage") == 20
    assert store.get_string("ending") == "gate"

def test_snapshot_is_a_copy():
    store = VariableStore()
    store.set_int("courage", 1)
    snapshot = store.snapshot()

    store.set_int("courage", 2)

    assert snapshot.ints == {"courage": 1}

def test_restore_replaces_everything():
    store = VariableStore()
    store.set_bool("stale", True)

    store.restore(StoreSnapshot(ints={"courage": 3}))

    assert not store.get_bool("stale")
    assert store.get_int("courage") == 3

def test_evaluate_condition_reads_live_values():
    store = VariableStore()
    assert not store.evaluate_condition("courage >= 10")

    store.add_int("courage", 10)
    assert store.evaluate_condition("courage >= 10")

    store.add_int("courage", -1)
    assert not store.evaluate_condition("courage >= 10")
