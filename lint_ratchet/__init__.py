"""lint-ratchet: adopt a strict linter one baseline at a time."""

__version__ = "0.1.0"
