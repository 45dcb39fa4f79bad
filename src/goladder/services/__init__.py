"""
Services built on the rating engine and the database.

- schedule: apply a round scheduling submission
- standings: season standings and crosstable
- presence: who intends to play the upcoming rounds
- data_exchange: season export and import
"""
