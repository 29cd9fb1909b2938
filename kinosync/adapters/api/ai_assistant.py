"""
Assistant IA (Anthropic Messages API) utilise en dernier recours par la cascade.

Deux demandes sont possibles :
- proposer le titre et l'annee d'un nom de fichier brut (translitteration,
  fautes d'orthographe) ;
- retablir la lettre ё dans un titre cyrillique ecrit avec е.

Les reponses sont attendues en JSON {"title", "year", "error"} et sont mises
en cache 30 jours, avec l'entree brute comme cle.
"""

import json
import re
from typing import Any, Optional

import anthropic
from loguru import logger

from kinosync.adapters.api.cache import APICache
from kinosync.core.errors import AIAssistError, ProviderUnavailableError
from kinosync.core.ports import IAIAssistant
from kinosync.core.value_objects import ParsedTitle

JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

TITLE_YEAR_PROMPT = """\
I need the corrected movie name that could be found on IMDb/TMDb, and its year if present or known.
The name may be Russian transliterated to the Latin alphabet: in that case transliterate it back to Cyrillic.
Keep it sane: "Padal" is "Падал", not "Падаль".
Do not translate an original Russian name to English or an original English name to Russian.
If the name is the original one with spelling mistakes, correct the mistakes.
Answer only in JSON:
{"title": "correct movie title", "year": "1999 or empty string", "error": null or "why the title can't be determined"}
Do not return an error when only the year is unknown.
movie: "%s"
"""

YO_PROMPT = """\
Give this movie name in its original Cyrillic spelling, using the letter "ё" where "е" was written instead.
If no "е" to "ё" change is needed, return the name unchanged. Do not modify other letters.
Answer only in JSON:
{"title": "correct movie title", "error": null or "why you can't answer"}
movie: "%s"
"""


def parse_answer(text: str) -> dict[str, Any]:
    """
    Extrait l'objet JSON d'une reponse de l'assistant.

    Raises:
        AIAssistError: Reponse sans JSON valide, ou champ error renseigne
    """
    match = JSON_OBJECT_RE.search(text)
    if not match:
        raise AIAssistError(f"reponse sans JSON : {text[:80]!r}")
    try:
        answer = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise AIAssistError(f"JSON invalide : {exc}") from exc
    if not isinstance(answer, dict):
        raise AIAssistError("reponse JSON inattendue")
    if answer.get("error"):
        raise AIAssistError(str(answer["error"]))
    if not str(answer.get("title") or "").strip():
        raise AIAssistError("titre absent de la reponse")
    return answer


class AnthropicAssistant(IAIAssistant):
    """
    Implementation de IAIAssistant sur l'API Anthropic.

    Example:
        assistant = AnthropicAssistant(api_key="sk-...", cache=cache)
        parsed = await assistant.propose_title_year("Brat.2.2000.DVDRip")
    """

    MAX_TOKENS = 200

    def __init__(self, api_key: str, cache: APICache, model: str) -> None:
        self._api_key = api_key
        self._cache = cache
        self._model = model
        self._client: Optional[anthropic.AsyncAnthropic] = None

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client

    async def propose_title_year(self, raw_name: str) -> ParsedTitle:
        answer = await self._ask(f"ai:title_year:{raw_name}", TITLE_YEAR_PROMPT % raw_name)
        year = str(answer.get("year") or "").strip()
        if not re.fullmatch(r"\d{4}", year):
            year = ""
        parsed = ParsedTitle(title=str(answer["title"]).strip(), year=year)
        logger.info(f"IA : '{raw_name}' -> '{parsed}'")
        return parsed

    async def propose_script_correction(self, title: str) -> str:
        answer = await self._ask(f"ai:yo:{title}", YO_PROMPT % title)
        return str(answer["title"]).strip()

    async def _ask(self, cache_key: str, prompt: str) -> dict[str, Any]:
        async def fetch() -> str:
            if not self._api_key:
                raise AIAssistError("cle API Anthropic absente")
            logger.debug(f"IA : requete {cache_key}")
            try:
                response = await self._get_client().messages.create(
                    model=self._model,
                    max_tokens=self.MAX_TOKENS,
                    temperature=0,
                    messages=[{"role": "user", "content": prompt}],
                )
            except anthropic.APIError as exc:
                raise AIAssistError(f"appel Anthropic en echec : {exc}") from exc
            return "".join(
                block.text for block in response.content if getattr(block, "type", "") == "text"
            )

        try:
            text = await self._cache.cached(cache_key, self._cache.LONG_TTL, fetch)
        except ProviderUnavailableError as exc:
            raise AIAssistError(str(exc)) from exc
        return parse_answer(text)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
