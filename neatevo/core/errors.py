"""
Error types shared across the engine.

Invariant violations (malformed genomes, precondition breaches, reserved-name
collisions) raise InvariantError. Expected negative outcomes of randomized
exploration, such as a rejected connection, are returned as plain booleans
and never raised.
"""


class InvariantError(ValueError):
    """A genome, network or call violated an engine invariant."""
