"""Daily task tracking: record validation, daily/batch aggregation, CSV export.

Records are stored per user, re-aggregated on every snapshot of the full
collection, and pushed to live subscribers after each mutation.
"""
