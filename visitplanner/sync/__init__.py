"""
Fragment <-> UI synchronisation.

Responsibilities:
- Own the single in-memory trip state derived from the current fragment.
- Push control changes back into the fragment without a full reload.
- Re-parse on external navigation (typed URL, back/forward) exactly once.
"""
