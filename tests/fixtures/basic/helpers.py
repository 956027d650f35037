"""Plain helpers: nothing here is a registered function."""

from ._generated.api import internal

MAX_PLAYERS = 64

refresh_ref = internal.players.refresh_ranking


def latest_game(ctx):
    return ctx.db.query("games").first()
