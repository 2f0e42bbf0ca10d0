"""
Personal coffee collections.

Responsibilities:
- Promote an analysis into a named, user-owned collection entry.
- Keep collection names unique per user, including under concurrent saves.
- Enforce ownership on detail reads, updates and deletes.
- Report whether an analysis is currently saved, whatever flag encoding the store uses.
"""
