"""Data model: projects, indicators and their before/after measurements.

- types.py: enums and frozen dataclasses
- parsing.py: build/serialize them from store rows and API payloads (camelCase or snake_case)
"""
