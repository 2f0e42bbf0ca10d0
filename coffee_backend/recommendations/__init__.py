"""
Coffee recommendation engine.

Responsibilities:
- Validate five-attribute taste preferences (aroma, acidity, nutty, body, sweetness).
- Score catalog blends by Euclidean closeness on a 0-100 scale.
- Rank matches deterministically and explain each one in a few short reasons.
- Serve the "best match + similar" variant and blend-to-blend lookups.
"""
