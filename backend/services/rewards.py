"""
rewards.py — Mission reward table.
Base values grow with difficulty, scale with how rarely the mission recurs,
and get a 1.5x bonus for cooperative missions.
"""

REWARD_TABLE = {
    "easy": {"xp": 50, "coins": 10, "game_coins": 100},
    "medium": {"xp": 75, "coins": 30, "game_coins": 150},
    "hard": {"xp": 100, "coins": 50, "game_coins": 200},
    "epic": {"xp": 150, "coins": 70, "game_coins": 250},
}

FREQUENCY_MULTIPLIERS = {"daily": 1, "weekly": 5, "monthly": 15, "yearly": 100}

COOP_MULTIPLIER = 1.5


def _round_half_up(value: float) -> int:
    # round() would bank 0.5 to even
    return int(value + 0.5)


def calculate_rewards(difficulty: str, frequency: str, is_coop: bool) -> dict:
    """Return {"xp", "coins", "game_coins"} for a mission definition."""
    base = REWARD_TABLE.get(difficulty, REWARD_TABLE["easy"])
    mult = FREQUENCY_MULTIPLIERS.get(frequency, 1)
    coop = COOP_MULTIPLIER if is_coop else 1

    return {
        "xp": _round_half_up(base["xp"] * mult * coop),
        "coins": _round_half_up(base["coins"] * mult * coop),
        "game_coins": _round_half_up(base["game_coins"] * mult * coop),
    }


def apply_rewards(mission, is_coop: bool | None = None) -> dict:
    """Overwrite a mission's reward fields from its difficulty and frequency."""
    r = calculate_rewards(
        mission.difficulty,
        mission.frequency,
        mission.is_coop if is_coop is None else is_coop,
    )
    mission.xp_reward = r["xp"]
    mission.coin_reward = r["coins"]
    mission.game_coin_reward = r["game_coins"]
    return r
