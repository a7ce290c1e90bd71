from __future__ import annotations


class ConfigurationError(ValueError):
    code = "E_CONFIGURATION"
    message = "Game configuration is invalid."


class CombatError(Exception):
    code = "E_COMBAT"
    message = "The battle could not be started."


class UnknownTierError(CombatError):
    code = "E_UNKNOWN_TIER"
    message = "That tier does not exist."


class SelfChallengeError(CombatError):
    code = "E_SELF_CHALLENGE"
    message = "You cannot fight yourself."
