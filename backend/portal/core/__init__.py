"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Domain rules never read the clock: services read "now" and pass moments or
      dates in, with the time zone as an argument
    - Only the response envelope and ErrorContext stamp the current time

Design Decisions:
    - Functional core separated from imperative shell: conflict and dedup rules
      are tested without a database
"""
