"""
CleanMissingData — Utilities Package

Schema model, dtype inference and schema projection.
"""
