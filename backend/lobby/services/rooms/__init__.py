"""Room session management: registry, lifecycle rules and match statistics.

Transport-free; the HTTP blueprints call into RoomLifecycle and only
translate its results and exceptions.
"""
from lobby.services.rooms.lifecycle import RoomLifecycle
from lobby.services.rooms.registry import RoomRegistry, clamp_max_players
from lobby.services.rooms.stats import MatchHistory, record_match

__all__ = [
    'RoomLifecycle',
    'RoomRegistry',
    'clamp_max_players',
    'MatchHistory',
    'record_match',
]
