"""
Background workers.

Only the SQL-backed store needs one: Redis evicts expired pastes itself.
"""
