"""
Constantes globales pour KinoSync.

Ce module contient les constantes utilisees dans l'application:
- Extensions video reconnues
- Suffixes des fichiers annexes de la bibliotheque
- Mapping des IDs de genre TMDB vers noms russes (langue de la bibliotheque)
- Types de contenus Kinopoisk acceptes
"""

# Extensions video reconnues (sans le point, comparaison insensible a la casse)
VIDEO_EXTENSIONS = frozenset({
    "mov",
    "m4v",
    "mkv",
    "avi",
    "mp4",
    "mpg",
    "wmv",
    "flv",
    "webm",
    "ts",
    "m2ts",
    "mxf",
    "ogv",
    "3gp",
    "3g2",
})

# Un repertoire contenant VIDEO_TS est un DVD complet, traite comme un fichier video
DVD_DIRECTORY = "VIDEO_TS"

# Fichiers annexes d'un film : <item>.nfo, <item>-poster.jpg, <item>-fanart.jpg
NFO_SUFFIX = ".nfo"
POSTER_SUFFIX = "-poster.jpg"
FANART_SUFFIX = "-fanart.jpg"
SIDECAR_SUFFIXES = (POSTER_SUFFIX, FANART_SUFFIX, NFO_SUFFIX)

# Fichiers annexes a la racine d'une serie
TVSHOW_NFO = "tvshow.nfo"
SERIES_POSTER = "poster.jpg"
SERIES_FANART = "fanart.jpg"

# Les centres multimedia telechargent eux-memes les images TMDB
TMDB_IMAGE_HOST = "image.tmdb.org"

# Mapping des IDs de genre TMDB (films) vers noms russes
# Source: https://api.themoviedb.org/3/genre/movie/list?language=ru-RU
TMDB_GENRE_MAPPING = {
    28: "боевик",
    12: "приключения",
    16: "мультфильм",
    35: "комедия",
    80: "криминал",
    99: "документальный",
    18: "драма",
    10751: "семейный",
    14: "фэнтези",
    36: "история",
    27: "ужасы",
    10402: "музыка",
    9648: "детектив",
    10749: "мелодрама",
    878: "фантастика",
    10770: "телевизионный фильм",
    53: "триллер",
    10752: "военный",
    37: "вестерн",
}

# Mapping des IDs de genre TMDB (series) vers noms russes
# Source: https://api.themoviedb.org/3/genre/tv/list?language=ru-RU
TMDB_TV_GENRE_MAPPING = {
    10759: "Боевик и Приключения",
    16: "мультфильм",
    35: "комедия",
    80: "криминал",
    99: "документальный",
    18: "драма",
    10751: "семейный",
    10762: "Детский",
    9648: "детектив",
    10763: "Новости",
    10764: "Реалити-шоу",
    10765: "НФ и Фэнтези",
    10766: "Мыльная опера",
    10767: "Ток-шоу",
    10768: "Война и Политика",
    37: "вестерн",
}

# Types de contenus Kinopoisk pris en compte
KINOPOISK_MOVIE_TYPES = frozenset({"movie", "cartoon", "anime"})
KINOPOISK_SERIES_TYPES = frozenset({"tv-series", "tv-show", "animated-series"})
