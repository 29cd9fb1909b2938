"""
Transliteration latin <-> cyrillique.

Conversion caractere par caractere, volontairement approximative : elle sert
uniquement a comparer des titres ecrits dans des scripts differents
("Brat" contre "Брат") et n'est jamais utilisee pour produire un titre affiche.

Vers le cyrillique, les sequences les plus longues sont essayees en premier
(trigrammes, puis digrammes, puis lettres seules). La casse de la premiere
lettre d'une sequence decide de la casse du resultat. Vers le latin, chaque
lettre cyrillique est romanisee par unidecode.
"""

from unidecode import unidecode

from kinosync.core.value_objects import Script

_LATIN_TO_CYRILLIC: dict[str, str] = {
    "sch": "щ",
    "ch": "ч",
    "zh": "ж",
    "sh": "ш",
    "yo": "ё",
    "jo": "ё",
    "yu": "ю",
    "ju": "ю",
    "ya": "я",
    "ja": "я",
    "a": "а",
    "b": "б",
    "c": "ц",
    "d": "д",
    "e": "е",
    "f": "ф",
    "g": "г",
    "h": "х",
    "i": "и",
    "j": "й",
    "k": "к",
    "l": "л",
    "m": "м",
    "n": "н",
    "o": "о",
    "p": "п",
    "q": "к",
    "r": "р",
    "s": "с",
    "t": "т",
    "u": "у",
    "v": "в",
    "w": "в",
    "x": "кс",
    "y": "ы",
    "z": "з",
    "'": "ь",
}

_MAX_SEQUENCE = max(len(key) for key in _LATIN_TO_CYRILLIC)

# unidecode rend les signes dur et mou par des apostrophes
_HARD_SOFT_SIGNS = "'\""


def is_cyrillic_char(char: str) -> bool:
    return "Ѐ" <= char <= "ӿ"


def is_latin_char(char: str) -> bool:
    return ("a" <= char <= "z") or ("A" <= char <= "Z")


def contains_cyrillic(text: str) -> bool:
    """Indique si le texte contient au moins une lettre cyrillique."""
    return any(is_cyrillic_char(char) for char in text)


def detect_script(text: str) -> Script:
    """
    Script dominant d'un texte : celui qui compte le plus de lettres.

    En cas d'egalite (ou sans lettre), le latin l'emporte.
    """
    cyrillic = sum(1 for char in text if is_cyrillic_char(char))
    latin = sum(1 for char in text if is_latin_char(char))
    return Script.CYRILLIC if cyrillic > latin else Script.LATIN


def _match_case(source: str, converted: str) -> str:
    if source[:1].isupper():
        return converted[:1].upper() + converted[1:]
    return converted


def to_cyrillic(text: str) -> str:
    """
    Translittere les lettres latines d'un texte en cyrillique.

    Les caracteres deja cyrilliques, les chiffres et la ponctuation
    (hors apostrophe) sont conserves tels quels.
    """
    result: list[str] = []
    index = 0
    while index < len(text):
        for size in range(_MAX_SEQUENCE, 0, -1):
            chunk = text[index:index + size]
            if len(chunk) < size:
                continue
            converted = _LATIN_TO_CYRILLIC.get(chunk.lower())
            if converted is not None:
                result.append(_match_case(chunk, converted))
                index += size
                break
        else:
            result.append(text[index])
            index += 1
    return "".join(result)


def to_latin(text: str) -> str:
    """Translittere les lettres cyrilliques d'un texte en latin."""
    return "".join(
        unidecode(char).strip(_HARD_SOFT_SIGNS) if is_cyrillic_char(char) else char
        for char in text
    )


def transliterate(text: str, target: Script) -> str:
    """
    Convertit un texte vers le script cible.

    Le resultat est identique a l'entree quand le texte n'a aucune lettre de
    l'autre script : un texte deja dans le script cible reste inchange.
    """
    if target is Script.CYRILLIC:
        if not any(is_latin_char(char) for char in text):
            return text
        return to_cyrillic(text)
    if not contains_cyrillic(text):
        return text
    return to_latin(text)
