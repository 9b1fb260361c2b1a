"""
Game journal board core.

Pure layout logic for pinning variable-sized game cards onto a column grid,
plus the small collaborators around it. Modules:
- board.py: Card, BoardPlacement, Span, GridRect and ticket type tables
- spans.py: span resolution per ticket type
- packer.py: greedy packing, with or without a pinned card
- insertion.py: collection-order insertion search
- engine.py: drop conflicts and strict commits
- intent.py: pointer to span/zone mapping
- metrics.py: board pixel metrics
- codec.py, db.py, store.py: persistence and the collection manager
"""
