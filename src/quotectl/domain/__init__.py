"""Domain layer: item types, money rules, tree primitives, calculation.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
