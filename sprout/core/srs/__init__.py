"""Spaced-repetition engine: ladders, tracker, selectors, resolver and rewards."""
