"""
Operations Layer

This package holds the logic between the database and the services:

- RosterOperations: read-only data fetches returning fully loaded entity graphs
- UnitScoring: per-unit leaderboards and per-student unit summaries
- PerformanceCombiner: cross-track roster rankings and performance summaries

The scoring modules are pure; only RosterOperations touches the database.
"""
