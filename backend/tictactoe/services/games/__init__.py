"""Game domain services: board rules, storage, rooms and the session gateway.

Everything here is importable without a request context so HTTP routes,
socket handlers and the single-player CLI share one rule set.
"""
