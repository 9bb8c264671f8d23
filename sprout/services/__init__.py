"""Service layer package."""

from sprout.services.leaderboard import InMemoryLeaderboard, LeaderboardEntry, ProgressLedger
from sprout.services.review import Answer, AnswerReceipt, BatchReport, ReviewService

__all__ = [
    "Answer",
    "AnswerReceipt",
    "BatchReport",
    "InMemoryLeaderboard",
    "LeaderboardEntry",
    "ProgressLedger",
    "ReviewService",
]
