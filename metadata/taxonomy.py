"""Map GOG free-text labels onto the fixed genre/theme/feature taxonomy."""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class Genre(str, Enum):
    UNKNOWN = "unknown"
    ACTION = "action"
    ADVENTURE = "adventure"
    INDIE = "indie"
    ROLE_PLAYING = "role_playing"
    STRATEGY = "strategy"
    REAL_TIME_STRATEGY = "real_time_strategy"
    TURN_BASED_STRATEGY = "turn_based_strategy"
    TACTICAL = "tactical"
    SIMULATOR = "simulator"
    RACING = "racing"
    SPORT = "sport"
    SHOOTER = "shooter"
    ARCADE = "arcade"
    PUZZLE = "puzzle"
    PLATFORM = "platform"
    FIGHTING = "fighting"
    POINT_AND_CLICK = "point_and_click"
    HACK_AND_SLASH_BEAT_EM_UP = "hack_and_slash_beat_em_up"
    VISUAL_NOVEL = "visual_novel"
    CARD_AND_BOARD_GAME = "card_and_board_game"
    MMO = "mmo"
    MOBA = "moba"
    PINBALL = "pinball"
    QUIZ_TRIVIA = "quiz_trivia"


class Theme(str, Enum):
    UNKNOWN = "unknown"
    FANTASY = "fantasy"
    SCIENCE_FICTION = "science_fiction"
    HORROR = "horror"
    THRILLER = "thriller"
    SURVIVAL = "survival"
    HISTORICAL = "historical"
    STEALTH = "stealth"
    COMEDY = "comedy"
    BUSINESS = "business"
    DRAMA = "drama"
    NON_FICTION = "non_fiction"
    SANDBOX = "sandbox"
    KIDS = "kids"
    OPEN_WORLD = "open_world"
    WARFARE = "warfare"
    MYSTERY = "mystery"
    ROMANCE = "romance"
    EROTIC = "erotic"


class GameFeature(str, Enum):
    SINGLEPLAYER = "singleplayer"
    MULTIPLAYER = "multiplayer"
    CO_OP = "co_op"
    CROSSPLAY = "crossplay"
    ACHIEVEMENTS = "achievements"
    CONTROLLER_SUPPORT = "controller_support"
    CLOUD_SAVES = "cloud_saves"
    LEADERBOARDS = "leaderboards"
    SPLITSCREEN = "splitscreen"
    MODDING = "modding"
    VR = "vr"
    AR = "ar"
    WORKSHOP = "workshop"
    REMOTE_PLAY = "remote_play"
    LOCAL_MULTIPLAYER = "local_multiplayer"
    ONLINE_PVP = "online_pvp"
    ONLINE_PVE = "online_pve"
    LOCAL_PVP = "local_pvp"
    LOCAL_PVE = "local_pve"


def _invert(table: dict[Enum, tuple[str, ...]]) -> dict[str, Enum]:
    return {label: value for value, labels in table.items() for label in labels}


_GENRE_LABELS = _invert(
    {
        Genre.ACTION: ("action",),
        Genre.ADVENTURE: ("adventure",),
        Genre.INDIE: ("indie",),
        Genre.ROLE_PLAYING: ("rpg", "role-playing", "crpg", "jrpg"),
        Genre.STRATEGY: ("strategy",),
        Genre.REAL_TIME_STRATEGY: ("rts", "real-time strategy", "real-time"),
        Genre.TURN_BASED_STRATEGY: ("turn-based strategy", "turn-based"),
        Genre.TACTICAL: ("tactical", "tactical rpg"),
        Genre.SIMULATOR: ("simulation", "sim", "walking simulator"),
        Genre.RACING: ("racing",),
        Genre.SPORT: ("sports", "team sport"),
        Genre.SHOOTER: ("shooter", "fps", "fpp", "tpp", "shoot 'em up", "twin stick shooter"),
        Genre.ARCADE: ("arcade",),
        Genre.PUZZLE: ("puzzle", "logic", "puzzle platformer"),
        Genre.PLATFORM: ("platformer",),
        Genre.FIGHTING: ("fighting",),
        Genre.POINT_AND_CLICK: ("point-and-click", "point&click"),
        Genre.HACK_AND_SLASH_BEAT_EM_UP: ("hack and slash", "beat 'em up"),
        Genre.VISUAL_NOVEL: ("visual novel",),
        Genre.CARD_AND_BOARD_GAME: ("card game", "board game"),
        Genre.MMO: ("mmo",),
        Genre.MOBA: ("moba",),
        Genre.PINBALL: ("pinball",),
        Genre.QUIZ_TRIVIA: ("quiz", "trivia"),
    }
)

_THEME_LABELS = _invert(
    {
        Theme.FANTASY: ("fantasy", "magic", "supernatural", "medieval", "mythology"),
        Theme.SCIENCE_FICTION: (
            "sci-fi",
            "science fiction",
            "science",
            "space",
            "cyberpunk",
            "robots",
            "steampunk",
            "dystopian",
            "post-apocalyptic",
        ),
        Theme.HORROR: ("horror", "psychological horror", "survival horror"),
        Theme.THRILLER: ("thriller", "atmospheric", "dark"),
        Theme.SURVIVAL: ("survival",),
        Theme.HISTORICAL: ("historical", "world war ii", "world war i", "western", "noir", "classic"),
        Theme.STEALTH: ("stealth",),
        Theme.COMEDY: ("comedy", "funny", "parody", "dark comedy"),
        Theme.BUSINESS: ("business", "managerial", "management", "economic", "trading", "transportation"),
        Theme.DRAMA: ("drama", "emotional", "story rich", "narrative"),
        Theme.NON_FICTION: ("non-fiction", "educational", "programming"),
        Theme.SANDBOX: ("sandbox",),
        Theme.KIDS: ("kids", "family", "family friendly"),
        Theme.OPEN_WORLD: ("open world",),
        Theme.WARFARE: ("warfare", "war", "military", "combat"),
        Theme.MYSTERY: ("mystery", "detective", "investigation", "detective-mystery", "lovecraftian"),
        Theme.ROMANCE: ("romance", "dating sim"),
        Theme.EROTIC: ("erotic", "adult", "sexual content", "nudity", "nsfw", "hentai", "mature"),
    }
)

_FEATURE_LABELS = _invert(
    {
        GameFeature.SINGLEPLAYER: ("single-player", "single"),
        GameFeature.MULTIPLAYER: ("multi-player", "multiplayer", "online multiplayer", "galaxy multiplayer"),
        GameFeature.CO_OP: ("co-op", "cooperative", "online co-op", "local co-op"),
        GameFeature.CROSSPLAY: ("cross-platform multiplayer", "crossplay"),
        # GOG lists the Galaxy overlay next to achievements; it carries no separate feature.
        GameFeature.ACHIEVEMENTS: ("achievements", "overlay"),
        GameFeature.CONTROLLER_SUPPORT: ("controller support", "full controller support", "partial controller support"),
        GameFeature.CLOUD_SAVES: ("cloud saves",),
        GameFeature.LEADERBOARDS: ("leaderboards",),
        GameFeature.SPLITSCREEN: ("split-screen", "split screen"),
        GameFeature.MODDING: ("moddable", "mods", "mod"),
        GameFeature.VR: ("vr",),
        GameFeature.AR: ("ar",),
        GameFeature.WORKSHOP: ("workshop",),
        GameFeature.REMOTE_PLAY: ("remote play",),
        GameFeature.LOCAL_MULTIPLAYER: ("local multiplayer",),
        GameFeature.ONLINE_PVP: ("online pvp",),
        GameFeature.ONLINE_PVE: ("online pve",),
        GameFeature.LOCAL_PVP: ("local pvp",),
        GameFeature.LOCAL_PVE: ("local pve",),
    }
)


def _key(label) -> str:
    return str(label or "").strip().lower()


def map_genre(label) -> Genre:
    return _GENRE_LABELS.get(_key(label), Genre.UNKNOWN)


def map_theme(label) -> Theme:
    return _THEME_LABELS.get(_key(label), Theme.UNKNOWN)


def map_feature(label) -> GameFeature | None:
    return _FEATURE_LABELS.get(_key(label))


def map_labels(
    labels: Iterable[str],
) -> tuple[frozenset[Genre], frozenset[Theme], frozenset[GameFeature]]:
    """Run every label through all three tables, dropping unmapped values."""
    genres = set()
    themes = set()
    features = set()
    for label in labels:
        genre = map_genre(label)
        if genre is not Genre.UNKNOWN:
            genres.add(genre)
        theme = map_theme(label)
        if theme is not Theme.UNKNOWN:
            themes.add(theme)
        feature = map_feature(label)
        if feature is not None:
            features.add(feature)
    return frozenset(genres), frozenset(themes), frozenset(features)
