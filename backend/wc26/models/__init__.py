from wc26.models.tournament_session import GroupResult, TournamentSession

__all__ = [
    "GroupResult",
    "TournamentSession",
]
