"""
Cascade de resolution multi-fournisseurs.

Deux niveaux :

- find_best_match() parcourt les pages d'un fournisseur unique et garde le
  meilleur candidat. Arret des que le meilleur score atteint le seuil de
  sortie anticipee (90), des que plus de 4 pages ont ete lues avec un score
  d'au moins 80, ou quand le fournisseur n'a plus de page.

- CascadeResolver.resolve() interroge les fournisseurs dans l'ordre :
  fournisseur principal dans le script de la requete, correction ё par l'IA
  (titres cyrilliques), fournisseur principal avec la requete translitteree,
  fournisseurs secondaires, puis en dernier recours correction du nom de
  fichier par l'IA et une seule reprise de la cascade. Un score superieur a 90
  est accepte immediatement ; sinon le meilleur resultat vu est accepte s'il
  depasse le seuil d'acceptation (70, ou 80 pour un dossier multi-fichiers).

Une panne de fournisseur est journalisee et comptee comme "aucun candidat".
L'epuisement de toutes les sources produit NotFound, jamais une exception.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

import httpx
from loguru import logger

from kinosync.core.entities import Candidate, MediaRecord
from kinosync.core.entities.media import IdKind
from kinosync.core.errors import AIAssistError, ProviderUnavailableError
from kinosync.core.ports import (
    IAIAssistant,
    IDetailsProvider,
    IExternalIdLookup,
    IMetadataProvider,
)
from kinosync.core.value_objects import ParsedTitle, Script
from kinosync.services.matcher import best_candidate
from kinosync.services.transliteration import detect_script, transliterate
from kinosync.utils.constants import TMDB_IMAGE_HOST

# Erreurs d'un fournisseur traitees comme "aucun candidat"
PROVIDER_ERRORS = (ProviderUnavailableError, httpx.HTTPError, ValueError)


@dataclass(frozen=True)
class Thresholds:
    """
    Seuils de la cascade (configurables via Settings).

    Attributes:
        early_exit: Score au-dela duquel un resultat est accepte immediatement
        accept: Score minimum (exclu) pour accepter le meilleur resultat
        ambiguous_accept: Score minimum (exclu) pour un dossier multi-fichiers
        page_soft_limit: Nombre de pages apres lequel un score correct suffit
        page_soft_score: Score juge suffisant apres page_soft_limit pages
        two_part_similarity: Ressemblance de deux fichiers pour un film en 2 parties
        poster_fallback: Score minimum (exclu) du resultat Kinopoisk qui remplace
            une fiche TMDB sans affiche
        series_agreement: Score minimum (exclu) Kinopoisk quand TMDB et
            Kinopoisk s'accordent sur un titre
    """

    early_exit: int = 90
    accept: int = 70
    ambiguous_accept: int = 80
    page_soft_limit: int = 4
    page_soft_score: int = 80
    two_part_similarity: int = 90
    poster_fallback: int = 80
    series_agreement: int = 50


@dataclass(frozen=True)
class ProviderMatch:
    """Meilleur candidat trouve chez un fournisseur, sur toutes les pages lues."""

    provider: str
    record: Optional[MediaRecord] = None
    score: int = 0
    pages: int = 0


@dataclass(frozen=True)
class Resolved:
    """Identification acceptee."""

    record: MediaRecord
    score: int
    source: str


@dataclass(frozen=True)
class NotFound:
    """
    Aucune source n'a atteint le seuil d'acceptation.

    Un score de 0 signifie que la cascade est epuisee sans le moindre candidat.
    """

    best_record: Optional[MediaRecord] = None
    best_score: int = 0

    @property
    def exhausted(self) -> bool:
        return self.best_score == 0


ResolveOutcome = Union[Resolved, NotFound]


async def find_best_match(
    provider: IMetadataProvider,
    title: str,
    year: str,
    thresholds: Thresholds = Thresholds(),
) -> ProviderMatch:
    """
    Parcourt les pages d'un fournisseur et retourne son meilleur candidat.

    Args:
        provider: Fournisseur a interroger
        title: Titre recherche
        year: Annee recherchee ("" si inconnue)
        thresholds: Seuils d'arret

    Returns:
        ProviderMatch (score 0 si aucun candidat ou si le fournisseur est en panne)
    """
    best: Optional[Candidate] = None
    page = 0
    while True:
        page += 1
        try:
            result = await provider.find_candidates(title, year, page)
        except PROVIDER_ERRORS as exc:
            logger.warning(f"{provider.name} : recherche '{title}' en echec ({exc})")
            break

        candidate = best_candidate(title, year, result.candidates)
        if candidate is not None and (best is None or candidate.score > best.score):
            best = candidate
            logger.debug(
                f"{provider.name} p{page} : '{candidate.record.title}' "
                f"({candidate.record.year}) score {candidate.score}"
            )

        best_score = best.score if best else 0
        if best_score >= thresholds.early_exit:
            break
        if page > thresholds.page_soft_limit and best_score >= thresholds.page_soft_score:
            break
        if result.total_pages <= page:
            break

    if best is None:
        return ProviderMatch(provider=provider.name, pages=page)
    return ProviderMatch(
        provider=provider.name, record=best.record, score=best.score, pages=page
    )


@dataclass
class _BestSoFar:
    match: ProviderMatch = field(default_factory=lambda: ProviderMatch(provider=""))
    query_script: Script = Script.LATIN

    @property
    def score(self) -> int:
        return self.match.score

    def offer(self, match: ProviderMatch, query: str) -> None:
        if match.record is not None and match.score > self.match.score:
            self.match = match
            self.query_script = detect_script(query)


class CascadeResolver:
    """
    Resout un titre en fiche canonique a travers une cascade de fournisseurs.

    Le premier fournisseur de `providers` est le fournisseur principal : c'est
    lui qui est re-interroge avec la correction ё et la transliteration.

    Example:
        resolver = CascadeResolver(providers=[tmdb, imdb, kinopoisk], ...)
        outcome = await resolver.resolve("Brat 2", "2000")
        if isinstance(outcome, Resolved):
            print(outcome.record.title)
    """

    def __init__(
        self,
        providers: list[IMetadataProvider],
        series_providers: Optional[list[IMetadataProvider]] = None,
        ai_assistant: Optional[IAIAssistant] = None,
        details_provider: Optional[IDetailsProvider] = None,
        id_lookup: Optional[IExternalIdLookup] = None,
        poster_provider: Optional[IMetadataProvider] = None,
        thresholds: Thresholds = Thresholds(),
    ) -> None:
        self._providers = providers
        self._series_providers = series_providers or []
        self._ai = ai_assistant
        self._details_provider = details_provider
        self._id_lookup = id_lookup
        self._poster_provider = poster_provider
        self.thresholds = thresholds

    async def resolve(
        self,
        title: str,
        year: str,
        ambiguous: bool = False,
        raw_name: Optional[str] = None,
    ) -> ResolveOutcome:
        """
        Identifie un film (ou une serie) a partir d'un titre normalise.

        Args:
            title: Titre normalise
            year: Annee ("" si inconnue)
            ambiguous: True pour un dossier multi-fichiers (seuil plus strict)
            raw_name: Nom brut soumis a l'IA en dernier recours

        Returns:
            Resolved si un resultat depasse le seuil, NotFound sinon
        """
        threshold = self.thresholds.ambiguous_accept if ambiguous else self.thresholds.accept
        best = _BestSoFar()

        await self._run_cascade(title, year, best, threshold, allow_ai=True)

        if best.score <= threshold and self._ai is not None:
            proposal = await self._propose_title_year(raw_name or title)
            if proposal is not None and (proposal.title, proposal.year) != (title, year):
                logger.info(f"Nouvelle tentative avec la proposition de l'IA : {proposal}")
                await self._run_cascade(
                    proposal.title, proposal.year, best, threshold, allow_ai=False
                )

        if best.score > threshold and best.match.record is not None:
            record = await self.finalize(best.match.record, best.query_script)
            logger.info(
                f"Identifie : {record.display_name} [{record.identity}] "
                f"score {best.score} via {best.match.provider}"
            )
            return Resolved(record=record, score=best.score, source=best.match.provider)

        self._log_not_found(title, year, best)
        return NotFound(best_record=best.match.record, best_score=best.score)

    async def resolve_series(self, title: str, year: str) -> ResolveOutcome:
        """
        Identifie une serie (dossier multi-fichiers).

        Ordre : recherche series du fournisseur principal (acceptee au-dela du
        seuil multi-fichiers), correction ё par l'IA, fournisseur series
        secondaire (accepte au-dela du seuil general), puis accord entre les
        deux sources sur un titre commun.
        """
        if not self._series_providers:
            return NotFound()

        primary, *others = self._series_providers
        threshold = self.thresholds.ambiguous_accept
        best = _BestSoFar()

        primary_match = await find_best_match(primary, title, year, self.thresholds)
        best.offer(primary_match, title)

        if best.score <= threshold and self._should_correct_script(title):
            corrected = await self._propose_script_correction(title)
            if corrected and corrected != title:
                corrected_match = await find_best_match(primary, corrected, year, self.thresholds)
                if corrected_match.score > primary_match.score:
                    primary_match = corrected_match
                best.offer(corrected_match, corrected)

        if best.score > threshold:
            return await self._resolved(best)

        for provider in others:
            match = await find_best_match(provider, title, year, self.thresholds)
            best.offer(match, title)
            if match.score > self.thresholds.accept:
                return await self._resolved(best)

            if (
                match.score > self.thresholds.series_agreement
                and primary_match.record is not None
                and match.record is not None
                and _share_title(primary_match.record, match.record)
            ):
                logger.info(
                    f"{primary.name} et {provider.name} s'accordent sur "
                    f"'{primary_match.record.title}'"
                )
                agreed = _BestSoFar()
                agreed.offer(primary_match, title)
                return await self._resolved(agreed)

        self._log_not_found(title, year, best)
        return NotFound(best_record=best.match.record, best_score=best.score)

    async def finalize(
        self, record: MediaRecord, query_script: Script = Script.CYRILLIC
    ) -> MediaRecord:
        """
        Complete une fiche acceptee.

        - Fiche IMDb : remplacee par la fiche TMDB correspondante si elle existe.
        - Fiche TMDB trouvee avec une requete latine : rechargee dans la langue
          de la bibliotheque.
        - Fiche TMDB sans affiche : remplacee par la fiche Kinopoisk du titre
          original si elle lui correspond suffisamment.
        """
        if record.identity.id_kind is IdKind.IMDB and self._id_lookup is not None:
            try:
                found = await self._id_lookup.find_by_imdb_id(record.identity.external_id)
            except PROVIDER_ERRORS as exc:
                logger.warning(f"Recherche par identifiant {record.identity} en echec : {exc}")
                found = None
            if found is not None:
                record = found
        elif (
            record.identity.id_kind is IdKind.TMDB
            and query_script is Script.LATIN
            and self._details_provider is not None
        ):
            try:
                details = await self._details_provider.load_details(record)
            except PROVIDER_ERRORS as exc:
                logger.warning(f"Details de {record.identity} non charges : {exc}")
                details = None
            if details is not None:
                record = details

        if (
            record.identity.id_kind is IdKind.TMDB
            and not record.poster_url
            and self._poster_provider is not None
        ):
            record = await self._poster_fallback(record)
        return record

    async def _run_cascade(
        self,
        title: str,
        year: str,
        best: _BestSoFar,
        threshold: int,
        allow_ai: bool,
    ) -> None:
        if not self._providers:
            return
        primary, *others = self._providers
        script = detect_script(title)

        if await self._attempt(best, primary, title, year):
            return

        if allow_ai and best.score <= threshold and self._should_correct_script(title):
            corrected = await self._propose_script_correction(title)
            if corrected and corrected != title:
                if await self._attempt(best, primary, corrected, year):
                    return

        alternate = transliterate(title, script.other)
        if alternate != title:
            if await self._attempt(best, primary, alternate, year):
                return

        for provider in others:
            if await self._attempt(best, provider, title, year):
                return

    async def _attempt(
        self, best: _BestSoFar, provider: IMetadataProvider, title: str, year: str
    ) -> bool:
        """Interroge un fournisseur ; True si le score permet une sortie anticipee."""
        match = await find_best_match(provider, title, year, self.thresholds)
        best.offer(match, title)
        return best.score > self.thresholds.early_exit

    def _should_correct_script(self, title: str) -> bool:
        return (
            self._ai is not None
            and detect_script(title) is Script.CYRILLIC
            and "е" in title.lower()
        )

    async def _propose_script_correction(self, title: str) -> Optional[str]:
        try:
            corrected = await self._ai.propose_script_correction(title)
        except AIAssistError as exc:
            logger.warning(f"Correction ё par l'IA en echec pour '{title}' : {exc}")
            return None
        logger.debug(f"Correction ё proposee : '{title}' -> '{corrected}'")
        return corrected

    async def _propose_title_year(self, raw_name: str) -> Optional[ParsedTitle]:
        try:
            return await self._ai.propose_title_year(raw_name)
        except AIAssistError as exc:
            logger.warning(f"Correction du nom par l'IA en echec pour '{raw_name}' : {exc}")
            return None

    async def _poster_fallback(self, record: MediaRecord) -> MediaRecord:
        query = record.original_title or record.title
        logger.debug(f"Pas d'affiche pour {record.identity}, recherche sur {self._poster_provider.name}")
        match = await find_best_match(self._poster_provider, query, record.year, self.thresholds)
        if match.record is not None and match.score > self.thresholds.poster_fallback:
            return match.record
        return record

    async def _resolved(self, best: _BestSoFar) -> Resolved:
        record = await self.finalize(best.match.record, best.query_script)
        logger.info(
            f"Serie identifiee : {record.display_name} [{record.identity}] "
            f"score {best.score} via {best.match.provider}"
        )
        return Resolved(record=record, score=best.score, source=best.match.provider)

    @staticmethod
    def _log_not_found(title: str, year: str, best: _BestSoFar) -> None:
        if best.match.record is None:
            logger.warning(f"Aucun candidat pour '{title}' ({year or '-'})")
        else:
            logger.warning(
                f"Meilleur candidat pour '{title}' ({year or '-'}) refuse : "
                f"'{best.match.record.title}' score {best.score}"
            )


def _share_title(first: MediaRecord, second: MediaRecord) -> bool:
    """Les deux fiches ont-elles un titre en commun (insensible a la casse) ?"""
    first_titles = {title.casefold() for title in first.titles()}
    return any(title.casefold() in first_titles for title in second.titles())
