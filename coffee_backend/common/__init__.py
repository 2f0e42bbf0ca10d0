"""
Shared result codes and input normalisation.

Responsibilities:
- Define the result-code taxonomy every engine operation reports through.
- Convert validation rejections and collaborator failures into results.
- Normalise loosely-typed request values (ids, scores, free text).
"""
