"""
Built-in command handlers.

| kind        | param                                      |
|-------------|--------------------------------------------|
| flag        | name                                       |
| unflag      | name                                       |
| var         | name+N / name-N / name=N                   |
| item        | item_id                                    |
| removeitem  | item_id                                    |
| journal     | unlock:page / open / goto:page / pickup    |
| cam         | point / point:seconds / reset|release|free |
| door        | action:door_id / door_id (open)            |
| activate    | object_id                                  |
| deactivate  | object_id                                  |
| toggle      | object_id                                  |
| flashlight  | on/off/toggle/recharge[:n]/refill/enable[:on]/disable |
| ending      | ending_id                                  |
| sky         | mood or blend[:seconds]                    |
| save        | [slot]                                     |
| load        | slot                                       |
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from whisper_framework.commands.parsing import Command

if TYPE_CHECKING:
    from whisper_framework.commands.dispatcher import CommandDispatcher
    from whisper_framework.world.context import WorldContext

logger = logging.getLogger(__name__)

ENDING_KEY = "current_ending_path"

CAMERA_RELEASE_WORDS = ("reset", "release", "free")

DOOR_ACTIONS = {
    "open": "open_door",
    "close": "close_door",
    "toggle": "toggle_door",
    "lock": "lock_door",
    "unlock": "unlock_door",
}

SKY_MOODS = {
    "blood": 0.0,
    "red": 0.0,
    "bleeding": 0.0,
    "night": 1.0,
    "dark": 1.0,
    "blue": 1.0,
    "twilight": 0.4,
    "dusk": 0.4,
    "dawn": 0.6,
}


def _collaborator(context: WorldContext, name: str, command: Command):
    """Fetch a collaborator, logging when the context has none."""
    collaborator = getattr(context, name, None)
    if collaborator is None:
        logger.warning(f"No {name} subsystem available; '{command}' ignored")
    return collaborator


def _target(command: Command, what: str) -> Optional[str]:
    if not command.param:
        logger.warning(f"'{command.kind}' command needs a {what}")
        return None
    return command.param


def _parse_float(text: str) -> Optional[float]:
    try:
        return float(text)
    except (TypeError, ValueError):
        return None


def _parse_int(text: str) -> Optional[int]:
    try:
        return int(text)
    except (TypeError, ValueError):
        return None


# --- Variables ---

def handle_flag(context: WorldContext, command: Command) -> None:
    name = _target(command, "flag name")
    if name:
        context.store.set_bool(name, True)


def handle_unflag(context: WorldContext, command: Command) -> None:
    name = _target(command, "flag name")
    if name:
        context.store.set_bool(name, False)


def parse_var_expression(text: str) -> Optional[tuple[str, str, int]]:
    """
    Split "name+N", "name-N" or "name=N".

    The earliest operator after the first character wins, so
    "debt=-5" assigns -5 and "sanity+-3" adds -3.

    Returns:
        (name, operator, value), or None if it does not parse
    """
    positions = [(text.find(op), op) for op in "+-=" if text.find(op) > 0]
    if not positions:
        return None

    index, op = min(positions)
    name = text[:index].strip()
    value = _parse_int(text[index + 1:].strip())
    if not name or value is None:
        return None
    return name, op, value


def handle_var(context: WorldContext, command: Command) -> None:
    parsed = parse_var_expression(command.param)
    if parsed is None:
        logger.warning(f"Cannot parse variable command '{command}'")
        return

    name, op, value = parsed
    if op == "+":
        context.store.add_int(name, value)
    elif op == "-":
        context.store.add_int(name, -value)
    else:
        context.store.set_int(name, value)


def handle_ending(context: WorldContext, command: Command) -> None:
    ending = _target(command, "ending id")
    if ending:
        context.store.set_string(ENDING_KEY, ending)


# --- Inventory ---

def handle_item(context: WorldContext, command: Command) -> None:
    inventory = _collaborator(context, "inventory", command)
    if inventory is None:
        return
    item_id = _target(command, "item id")
    if item_id and not inventory.add_item(item_id):
        logger.warning(f"Item not found: {item_id}")


def handle_remove_item(context: WorldContext, command: Command) -> None:
    inventory = _collaborator(context, "inventory", command)
    if inventory is None:
        return
    item_id = _target(command, "item id")
    if item_id and not inventory.remove_item(item_id):
        logger.warning(f"Item not in inventory: {item_id}")


# --- Journal ---

def handle_journal(context: WorldContext, command: Command) -> None:
    journal = _collaborator(context, "journal", command)
    if journal is None:
        return

    action = command.arg(0).lower()
    page_id = command.arg(1)

    if action == "unlock":
        if not page_id:
            logger.warning(f"'{command}' needs a page id")
        elif not journal.unlock_page(page_id):
            logger.warning(f"Journal page not found: {page_id}")
    elif action == "open":
        journal.open()
    elif action == "goto":
        if not page_id:
            logger.warning(f"'{command}' needs a page id")
        elif not journal.has_page(page_id):
            logger.warning(f"Journal page not found: {page_id}")
        else:
            journal.open(page_id)
    elif action == "pickup":
        journal.pick_up()
    else:
        logger.warning(f"Unknown journal action: '{action}'")


# --- Camera ---

def handle_cam(context: WorldContext, command: Command) -> None:
    camera = _collaborator(context, "camera", command)
    point_id = command.arg(0)
    if camera is None or not _target(command, "focus point"):
        return

    if point_id.lower() in CAMERA_RELEASE_WORDS:
        camera.release_focus()
        return

    hold = None
    if len(command.args) > 1:
        hold = _parse_float(command.arg(1))
        if hold is None:
            logger.warning(f"Ignoring bad camera duration in '{command}'")

    if not camera.focus_on(point_id, hold):
        logger.warning(f"Focus point not found: {point_id}")


# --- Doors and objects ---

def handle_door(context: WorldContext, command: Command) -> None:
    doors = _collaborator(context, "doors", command)
    if doors is None or not _target(command, "door id"):
        return

    args = command.args
    if len(args) > 1:
        action, door_id = args[0].lower(), args[1]
    else:
        action, door_id = "open", args[0]

    method = DOOR_ACTIONS.get(action)
    if method is None:
        logger.warning(f"Unknown door action: '{action}'")
        return

    if not getattr(doors, method)(door_id):
        logger.warning(f"Door not found: {door_id}")


def _object_handler(action: str):
    def handler(context: WorldContext, command: Command) -> None:
        objects = _collaborator(context, "activatables", command)
        if objects is None:
            return
        object_id = _target(command, "object id")
        if not object_id:
            return
        if not getattr(objects, action)(object_id):
            logger.warning(f"Activatable object not found: {object_id}")

    handler.__name__ = f"handle_{action}"
    return handler


handle_activate = _object_handler("activate")
handle_deactivate = _object_handler("deactivate")
handle_toggle = _object_handler("toggle")


# --- Flashlight ---

def handle_flashlight(context: WorldContext, command: Command) -> None:
    flashlight = _collaborator(context, "flashlight", command)
    if flashlight is None:
        return

    action = command.arg(0).lower()
    value = command.arg(1)

    if action == "on":
        flashlight.turn_on()
    elif action == "off":
        flashlight.turn_off()
    elif action == "toggle":
        flashlight.toggle()
    elif action in ("recharge", "refill"):
        amount = _parse_float(value) if value else None
        if amount is None:
            flashlight.refill()
        else:
            flashlight.recharge(amount)
    elif action == "enable":
        flashlight.enable(value.lower() == "on")
    elif action == "disable":
        flashlight.disable()
    else:
        logger.warning(f"Unknown flashlight action: '{action}'")


# --- Environment ---

def parse_mood(text: str) -> Optional[float]:
    """Mood keyword or numeric blend (clamped to 0..1)."""
    key = text.strip().lower()
    if key in SKY_MOODS:
        return SKY_MOODS[key]
    value = _parse_float(key)
    if value is None:
        return None
    return max(0.0, min(1.0, value))


def handle_sky(context: WorldContext, command: Command) -> None:
    environment = _collaborator(context, "environment", command)
    if environment is None or not _target(command, "mood"):
        return

    mood = parse_mood(command.arg(0))
    if mood is None:
        logger.warning(f"Unknown sky mood: '{command.arg(0)}'")
        return

    duration = context.config.default_sky_duration
    if len(command.args) > 1:
        parsed = _parse_float(command.arg(1))
        if parsed is not None:
            duration = parsed

    environment.transition_to(mood, duration)


# --- Save slots ---

def handle_save(context: WorldContext, command: Command) -> None:
    saves = _collaborator(context, "saves", command)
    if saves is None:
        return

    slot = context.config.quicksave_slot
    if command.param:
        slot = _parse_int(command.arg(0))
        if slot is None:
            logger.warning(f"Bad save slot in '{command}'")
            return

    if not saves.save(slot):
        logger.warning(f"Save to slot {slot} failed")


def handle_load(context: WorldContext, command: Command) -> None:
    saves = _collaborator(context, "saves", command)
    if saves is None or not _target(command, "slot"):
        return

    slot = _parse_int(command.arg(0))
    if slot is None:
        logger.warning(f"Bad save slot in '{command}'")
        return

    if not saves.load(slot):
        logger.warning(f"Save slot not found: {slot}")


BUILTIN_HANDLERS = {
    "flag": handle_flag,
    "unflag": handle_unflag,
    "var": handle_var,
    "item": handle_item,
    "removeitem": handle_remove_item,
    "journal": handle_journal,
    "cam": handle_cam,
    "door": handle_door,
    "activate": handle_activate,
    "deactivate": handle_deactivate,
    "toggle": handle_toggle,
    "flashlight": handle_flashlight,
    "ending": handle_ending,
    "sky": handle_sky,
    "save": handle_save,
    "load": handle_load,
}


def register_builtin_handlers(dispatcher: CommandDispatcher) -> None:
    """Install every built-in command kind."""
    for kind, handler in BUILTIN_HANDLERS.items():
        dispatcher.register(kind, handler)
