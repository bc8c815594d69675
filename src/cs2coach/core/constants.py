"""
cs2coach - Constants

Game constants, enums and default analysis thresholds used by the
correlation and rating engine.
"""

from enum import Enum, StrEnum


class Team(int, Enum):
    """CS2 team numbers."""

    UNASSIGNED = 0
    SPECTATOR = 1
    TERRORIST = 2
    CT = 3


class EventType(StrEnum):
    """Decoded game event types consumed by the ledger."""

    SERVER_INFO = "ServerInfo"
    PLAYER_DEATH = "PlayerDeath"
    WEAPON_FIRE = "WeaponFire"
    PLAYER_HURT = "PlayerHurt"
    ROUND_START = "RoundStart"
    ROUND_END = "RoundEnd"
    PLAYER_SPAWN = "PlayerSpawn"
    ITEM_PICKUP = "ItemPickup"
    ITEM_EQUIP = "ItemEquip"
    ITEM_DROP = "ItemDrop"
    FLASHBANG_DETONATE = "FlashbangDetonate"
    PLAYER_BLIND = "PlayerBlind"
    PLAYER_TEAM = "PlayerTeam"
    PLAYER_DISCONNECT = "PlayerDisconnect"
    MONEY_ADJUST = "MoneyAdjust"


# CS2 runs 64 tick on every server (subtick timestamps in between)
CS2_TICK_RATE = 64

# Trade window: revenge kill within 128 ticks (~2s at 64 tick)
TRADE_WINDOW_TICKS = 128

# Flash assist: blind of at least 0.7s landing within 96 ticks (~1.5s) of the kill
FLASH_ASSIST_WINDOW_TICKS = 96
FLASH_ASSIST_MIN_DURATION = 0.7

# Seconds after round start during which buys count toward the round loadout
BUY_TIME_SECONDS = 20.0

# Damage sources counted as utility damage
UTILITY_DAMAGE_WEAPONS = {
    "hegrenade",
    "molotov",
    "incgrenade",
    "inferno",
}

# Thrown items that never count toward weapon accuracy
NON_FIREARM_WEAPONS = {
    "flashbang",
    "hegrenade",
    "smokegrenade",
    "molotov",
    "incgrenade",
    "decoy",
    "knife",
    "knife_t",
    "bayonet",
    "c4",
}

# Equipment costs (CS2 values as of 2024)
WEAPON_COSTS = {
    # Pistols
    "glock": 0,
    "usp_silencer": 0,
    "hkp2000": 0,
    "p250": 300,
    "tec9": 500,
    "cz75a": 500,
    "fiveseven": 500,
    "elite": 400,
    "deagle": 700,
    "revolver": 600,
    # SMGs
    "mac10": 1050,
    "mp9": 1250,
    "mp7": 1500,
    "mp5sd": 1500,
    "ump45": 1200,
    "p90": 2350,
    "bizon": 1400,
    # Rifles
    "famas": 2050,
    "galilar": 1800,
    "m4a1": 3100,
    "m4a1_silencer": 2900,
    "ak47": 2700,
    "sg556": 3000,
    "aug": 3300,
    "ssg08": 1700,
    "awp": 4750,
    "g3sg1": 5000,
    "scar20": 5000,
    # Heavy
    "nova": 1050,
    "xm1014": 2000,
    "sawedoff": 1100,
    "mag7": 1300,
    "m249": 5200,
    "negev": 1700,
    # Equipment
    "vest": 650,
    "vesthelm": 1000,
    "defuser": 400,
    "taser": 200,
    # Grenades
    "flashbang": 200,
    "hegrenade": 300,
    "smokegrenade": 300,
    "molotov": 400,
    "incgrenade": 600,
    "decoy": 50,
}

# Weapon name variations seen in decoded streams
WEAPON_NAME_ALIASES = {
    "m4a4": "m4a1",
    "m4a1-s": "m4a1_silencer",
    "m4a1s": "m4a1_silencer",
    "ak-47": "ak47",
    "galil": "galilar",
    "p2000": "hkp2000",
    "usp_s": "usp_silencer",
    "usp-s": "usp_silencer",
    "cz-75": "cz75a",
    "dual_berettas": "elite",
    "r8": "revolver",
    "mp5": "mp5sd",
    "scout": "ssg08",
    "sg553": "sg556",
    "zeus": "taser",
    "kevlar": "vest",
    "assaultsuit": "vesthelm",
    "item_kevlar": "vest",
    "item_assaultsuit": "vesthelm",
    "defuse_kit": "defuser",
    "item_defuser": "defuser",
    "flash": "flashbang",
    "he": "hegrenade",
    "smoke": "smokegrenade",
    "inc": "incgrenade",
}

# Performance rating budget (points per component, sums to 100)
RATING_WEIGHTS = {
    "kdr": 15.0,
    "kpr": 15.0,
    "headshot": 10.0,
    "opening": 10.0,
    "clutch": 10.0,
    "trade": 5.0,
    "flash_assist": 7.0,
    "utility_damage": 7.0,
    "support": 6.0,
    "economy": 15.0,
}

# (min, max) ranges each raw metric is scaled over
RATING_RANGES = {
    "kdr": (0.5, 2.0),
    "kpr": (0.4, 1.2),
    "headshot": (0.2, 0.7),
    "opening": (0.3, 0.7),
    "clutch": (0.2, 0.6),
    "trade": (0.3, 0.7),
    "flash_assist": (0.1, 0.5),
    "utility_damage": (10.0, 30.0),
    "support": (0.2, 0.6),
    "economy": (2000.0, 4500.0),
}
