"""
Core business logic

- GameManager / RoundManager: lifecycle of games, rounds and picks
- state_machine: legal status transitions
- locks: row-level locking
- auth / permissions: who may act for which manager
"""
