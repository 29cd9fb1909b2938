"""
Reponses simulees de l'API Kinopoisk (api.kinopoisk.dev v1.4).

GET /movie/search?page=1&limit=20&query=...
"""

KINOPOISK_SEARCH_RESPONSE = {
    "docs": [
        {
            "id": 41519,
            "name": "Брат",
            "alternativeName": "Brat",
            "enName": "Brother",
            "type": "movie",
            "year": 1997,
            "description": "Демобилизовавшись, Данила Багров возвращается в родной городок.",
            "isSeries": False,
            "externalId": {"imdb": "tt0118767", "tmdb": 20992},
            "poster": {"url": "https://st.kp.yandex.net/images/film_big/41519.jpg"},
            "genres": [{"name": "криминал"}, {"name": "драма"}],
        },
        {
            "id": 464963,
            "name": "Кухня",
            "alternativeName": "",
            "type": "tv-series",
            "year": 2012,
            "isSeries": True,
            "externalId": {"imdb": "tt2396135"},
            "names": [{"name": "Кухня"}, {"name": "Kukhnya"}],
        },
        {
            "id": 77044,
            "name": "Брат. Съемки фильма",
            "type": "video",
            "year": 0,
            "isSeries": False,
        },
        {
            "id": 1227803,
            "name": "",
            "alternativeName": "Brat 3",
            "type": "movie",
            "year": 0,
            "isSeries": False,
            "names": [{"name": "Брат 3"}],
        },
    ],
    "total": 4,
    "limit": 20,
    "page": 1,
    "pages": 2,
}
