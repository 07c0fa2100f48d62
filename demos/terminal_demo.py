"""
Terminal Demo: the narrative core without a renderer

Demonstrates:
- Loading dialogue, journal and puzzle content from game/data
- Dialogue choices filtered by store conditions
- Commands driving inventory, journal, doors, camera and sky
- End nodes closing through the host loop's scheduler

Run: python -m demos.terminal_demo
"""

from pathlib import Path

from whisper_engine.core import DialogueEvent, GameConfig, HostLoop, WorldEvent
from whisper_engine.core.log import setup_logging
from whisper_engine.resources import ContentDatabase
from whisper_framework.camera import FocusPoint
from whisper_framework.config import NarrativeConfig
from whisper_framework.dialog import load_dialogue_file, load_dialogues
from whisper_framework.puzzles import PuzzleConfig, PuzzleController
from whisper_framework.world import ActivatableObject, Door, build_world

DATA_PATH = Path(__file__).resolve().parent.parent / "game" / "data"


def print_node(event):
    node = event["node"]
    speaker = f"{node.speaker}: " if node.speaker else ""
    print(f"\n  {speaker}{node.line_text}")


def print_world_event(event):
    details = ", ".join(f"{k}={v}" for k, v in event.data.items())
    print(f"    ({event.type.name.lower()}{': ' + details if details else ''})")


def choose(manager) -> bool:
    """Ask for a choice. Returns False when the player quits."""
    choices = manager.get_visible_choices()
    if not choices:
        input("  [enter] ")
        manager.advance_to_next_node()
        return True

    for i, choice in enumerate(choices, start=1):
        print(f"  {i}. {choice.text}")

    answer = input("  > ").strip().lower()
    if answer in ("q", "quit"):
        return False
    if answer.isdigit():
        manager.select_choice(int(answer) - 1)
    return True


def main():
    """Run the terminal demo."""
    config = GameConfig(title="Whispering Gate - Terminal Demo", content_path=str(DATA_PATH))
    setup_logging("WARNING")

    narrative = NarrativeConfig.from_file(DATA_PATH / "narrative.json")
    context = build_world(narrative)

    db = ContentDatabase(config.content_path)
    db.load_all()
    trees = load_dialogues(db, context.dispatcher)
    trees["gate_whispers"] = load_dialogue_file(
        DATA_PATH / "scripts" / "gate_whispers.dialog", context.dispatcher
    )
    context.journal.load_pages(db)

    context.camera.add_point(FocusPoint("writer_desk", (4.0, 1.5, -2.0)))
    context.camera.add_point(FocusPoint("mirror_portal", (-6.0, 2.0, 3.0)))
    context.doors.add(Door("cellar", is_locked=True, on_open_flag="cellar_opened"))
    context.activatables.add(ActivatableObject("mirror_portal", on_activate_flag="portal_open"))

    events = context.events
    events.subscribe(DialogueEvent.NODE_DISPLAYED, print_node, weak=False)
    for event_type in WorldEvent:
        events.subscribe(event_type, print_world_event, weak=False)

    loop = HostLoop(config, context.scheduler)
    loop.add(context.environment)
    loop.add(context.flashlight)

    print("=" * 50)
    print(config.title)
    print("=" * 50)

    manager = context.dialogue
    for tree_id in ("writer_intro", "gate_whispers"):
        tree = trees.get(tree_id)
        if tree is None:
            continue

        print(f"\n--- {tree.title or tree.id} ---")
        manager.start_dialogue(tree)
        while manager.is_active:
            node = manager.current_node
            if node.is_end_node and not manager.get_visible_choices():
                loop.run(until=lambda: not manager.is_active)
                break
            if not choose(manager):
                return

    puzzle_data = db.get_puzzle("cellar_tiles")
    if puzzle_data:
        print("\n--- The cellar tiles ---")
        PuzzleController(context, PuzzleConfig.from_dict(puzzle_data)).solve()

    store = context.store
    print("\n" + "=" * 50)
    print(f"Ending path: {store.get_string('current_ending_path') or '(none)'}")
    print(f"Sanity {store.get_int('sanity')}, courage {store.get_int('courage')}")
    print(f"Items: {', '.join(context.inventory.get_all_items()) or '(none)'}")
    print(f"Journal pages: {[p.page_id for p in context.journal.get_unlocked_pages()]}")
    print(f"Sky mood: {context.environment.mood:.2f}")


if __name__ == "__main__":
    main()
