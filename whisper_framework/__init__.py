"""
Whispering Gate Framework module.

Provides the narrative core built on top of the engine:
- State (variable store, condition expressions)
- Commands (parsing, dispatcher, built-in handlers)
- Dialog (trees, manager, parser, loader, triggers)
- World (shared context, doors, activatable objects)
- Inventory (items, flashlight)
- Journal (pages and unlocks)
- Camera (focus points)
- Environment (sky mood)
- Puzzles (outcome commands)
- Save (in-memory slots)
"""
