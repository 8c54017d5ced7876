"""
nstackgen — NStack localization source generator.
Version: 1.0

Turns an NStack localization catalog (sections of translation keys with
default values) into a source file exposing type-safe section accessors,
the available-language registry and an offline bundle of every language's
raw translation payload.

    nstackgen build nstack.json            # writes nstack.dart
    nstackgen build nstack.json --target python   # writes nstack.py
"""

__version__ = "1.0.0"
__all__ = ["builder", "build_step", "engine", "generators", "models", "runtime"]
