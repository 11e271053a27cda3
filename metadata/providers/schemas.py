"""pydantic models for the upstream payload fields the mappers consume.

Unknown fields are ignored; a missing required field or a wrong type fails
validation and surfaces as ``MalformedUpstreamResponse``.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from metadata.errors import MalformedUpstreamResponse

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class UpstreamModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


def validate_payload(model: type[ModelT], payload: Any, context: str) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        logger.error("[SCHEMA] validation failed context=%s errors=%s", context, exc.errors())
        raise MalformedUpstreamResponse(context, str(exc)) from exc


# MusicBrainz

class MBArtistCredit(UpstreamModel):
    name: str = ""
    joinphrase: str = ""


class MBLifeSpan(UpstreamModel):
    begin: str | None = None
    end: str | None = None
    ended: bool | None = None


class MBReleaseGroupRef(UpstreamModel):
    id: str


class MBReleaseRef(UpstreamModel):
    id: str
    title: str | None = None
    release_group: MBReleaseGroupRef | None = Field(default=None, alias="release-group")


class MBReleaseGroup(UpstreamModel):
    id: str
    title: str = ""
    artist_credit: list[MBArtistCredit] = Field(default_factory=list, alias="artist-credit")
    first_release_date: str | None = Field(default=None, alias="first-release-date")
    primary_type: str | None = Field(default=None, alias="primary-type")
    secondary_types: list[str] = Field(default_factory=list, alias="secondary-types")


class MBArtist(UpstreamModel):
    id: str
    name: str = ""
    disambiguation: str | None = None
    life_span: MBLifeSpan | None = Field(default=None, alias="life-span")
    type: str | None = None
    country: str | None = None


class MBRecording(UpstreamModel):
    id: str
    title: str = ""
    artist_credit: list[MBArtistCredit] = Field(default_factory=list, alias="artist-credit")
    first_release_date: str | None = Field(default=None, alias="first-release-date")
    length: int | None = None
    releases: list[MBReleaseRef] = Field(default_factory=list)


class MBSearchResponse(UpstreamModel):
    count: int | None = None
    offset: int | None = None
    release_groups: list[MBReleaseGroup] | None = Field(default=None, alias="release-groups")
    artists: list[MBArtist] | None = None
    recordings: list[MBRecording] | None = None
    release_group_count: int | None = Field(default=None, alias="release-group-count")
    artist_count: int | None = Field(default=None, alias="artist-count")
    recording_count: int | None = Field(default=None, alias="recording-count")

    @property
    def total_count(self) -> int:
        return (
            self.count
            or self.release_group_count
            or self.artist_count
            or self.recording_count
            or 0
        )


class MBTag(UpstreamModel):
    name: str
    count: int = 0


class MBUrl(UpstreamModel):
    resource: str = ""


class MBRelation(UpstreamModel):
    type: str = ""
    url: MBUrl | None = None


class MBArea(UpstreamModel):
    name: str | None = None


class MBArtistLookup(UpstreamModel):
    tags: list[MBTag] = Field(default_factory=list)
    area: MBArea | None = None
    life_span: MBLifeSpan | None = Field(default=None, alias="life-span")
    relations: list[MBRelation] = Field(default_factory=list)


class MBTrackRecording(UpstreamModel):
    id: str


class MBTrack(UpstreamModel):
    id: str
    position: str | int | None = None
    title: str = ""
    length: int | None = None
    recording: MBTrackRecording | None = None


class MBMedium(UpstreamModel):
    tracks: list[MBTrack] = Field(default_factory=list)


class MBLabel(UpstreamModel):
    name: str | None = None


class MBLabelInfo(UpstreamModel):
    label: MBLabel | None = None


class MBReleaseLookup(UpstreamModel):
    date: str | None = None
    media: list[MBMedium] = Field(default_factory=list)
    label_info: list[MBLabelInfo] = Field(default_factory=list, alias="label-info")


class MBReleaseList(UpstreamModel):
    releases: list[MBReleaseRef] = Field(default_factory=list)


class MBRecordingLookup(UpstreamModel):
    tags: list[MBTag] = Field(default_factory=list)
    length: int | None = None
    releases: list[MBReleaseRef] = Field(default_factory=list)


# TMDB

class TMDBGenre(UpstreamModel):
    id: int | None = None
    name: str = ""


class TMDBResult(UpstreamModel):
    id: int
    title: str | None = None
    name: str | None = None
    poster_path: str | None = None
    profile_path: str | None = None
    release_date: str | None = None
    first_air_date: str | None = None
    vote_average: float | None = None
    vote_count: int | None = None


class TMDBSearchResponse(UpstreamModel):
    page: int = 1
    results: list[TMDBResult] = Field(default_factory=list)
    total_pages: int = 0
    total_results: int = 0


class TMDBDetails(TMDBResult):
    overview: str | None = None
    tagline: str | None = None
    biography: str | None = None
    genres: list[TMDBGenre] = Field(default_factory=list)


# RAWG

class RAWGNamed(UpstreamModel):
    id: int | None = None
    name: str = ""
    slug: str = ""


class RAWGPlatformEntry(UpstreamModel):
    platform: RAWGNamed


class RAWGTag(RAWGNamed):
    language: str | None = None


class RAWGGame(UpstreamModel):
    id: int
    slug: str = ""
    name: str = ""
    released: str | None = None
    background_image: str | None = None
    rating: float | None = None
    ratings_count: int | None = None
    metacritic: int | None = None
    parent_platforms: list[RAWGPlatformEntry] | None = None
    platforms: list[RAWGPlatformEntry] | None = None
    genres: list[RAWGNamed] = Field(default_factory=list)
    developers: list[RAWGNamed] = Field(default_factory=list)
    publishers: list[RAWGNamed] = Field(default_factory=list)
    description_raw: str | None = None
    tags: list[RAWGTag] = Field(default_factory=list)


class RAWGDeveloper(UpstreamModel):
    id: int
    name: str = ""
    slug: str = ""
    image_background: str | None = None
    description: str | None = None


class RAWGGameList(UpstreamModel):
    count: int = 0
    results: list[RAWGGame] = Field(default_factory=list)


class RAWGDeveloperList(UpstreamModel):
    count: int = 0
    results: list[RAWGDeveloper] = Field(default_factory=list)


# IGDB

class TwitchToken(UpstreamModel):
    access_token: str
    expires_in: float
    token_type: str = ""


class IGDBCover(UpstreamModel):
    image_id: str | None = None


class IGDBNamed(UpstreamModel):
    name: str = ""


class IGDBInvolvedCompany(UpstreamModel):
    company: IGDBNamed | None = None
    developer: bool = False


class IGDBGame(UpstreamModel):
    id: int
    name: str = ""
    first_release_date: int | None = None
    cover: IGDBCover | None = None
    summary: str | None = None
    total_rating: float | None = None
    total_rating_count: int | None = None
    involved_companies: list[IGDBInvolvedCompany] = Field(default_factory=list)
    platforms: list[IGDBNamed] = Field(default_factory=list)
    genres: list[IGDBNamed] = Field(default_factory=list)
    themes: list[IGDBNamed] = Field(default_factory=list)
    url: str | None = None


class IGDBFranchiseGame(UpstreamModel):
    id: int
    cover: IGDBCover | None = None


class IGDBFranchise(UpstreamModel):
    id: int
    name: str = ""
    # Expanded game objects when the body asks for games.*, bare ids otherwise.
    games: list[IGDBFranchiseGame | int] = Field(default_factory=list)
    url: str | None = None


# Open Library

class OLBookDoc(UpstreamModel):
    key: str | None = None
    title: str | None = None
    author_name: list[str] = Field(default_factory=list)
    first_publish_year: int | None = None
    cover_i: int | None = None
    edition_count: int | None = None
    ratings_average: float | None = None
    review_count: int | None = None


class OLAuthorDoc(UpstreamModel):
    key: str | None = None
    name: str | None = None
    birth_date: str | None = None


class OLBookSearch(UpstreamModel):
    num_found: int = Field(default=0, alias="numFound")
    docs: list[OLBookDoc] = Field(default_factory=list)


class OLAuthorSearch(UpstreamModel):
    num_found: int = Field(default=0, alias="numFound")
    docs: list[OLAuthorDoc] = Field(default_factory=list)


class OLTextValue(UpstreamModel):
    value: str = ""


class OLLink(UpstreamModel):
    title: str = ""
    url: str = ""


class OLExcerpt(UpstreamModel):
    excerpt: str | OLTextValue = ""


class OLWork(UpstreamModel):
    key: str | None = None
    title: str | None = None
    covers: list[int] = Field(default_factory=list)
    description: str | OLTextValue | None = None
    subjects: list[str] = Field(default_factory=list)
    subject_places: list[str] = Field(default_factory=list)
    subject_people: list[str] = Field(default_factory=list)
    links: list[OLLink] = Field(default_factory=list)
    excerpts: list[OLExcerpt] = Field(default_factory=list)
    first_publish_date: str | None = None


# Hardcover

class GraphQLError(UpstreamModel):
    message: str = ""


class GraphQLEnvelope(UpstreamModel):
    data: dict[str, Any] | None = None
    errors: list[GraphQLError] | None = None


class HardcoverImage(UpstreamModel):
    url: str | None = None


class HardcoverDocument(UpstreamModel):
    id: int | str | None = None
    slug: str | None = None
    title: str | None = None
    name: str | None = None
    author_names: list[str] = Field(default_factory=list)
    release_year: int | None = None
    release_date_i: int | None = None
    compilation: bool | None = None
    image_url: str | None = None
    image: HardcoverImage | None = None
    rating: float | None = None
    ratings_count: int | None = None
    books_count: int | None = None

    @property
    def year(self) -> int | None:
        return self.release_year or self.release_date_i

    @property
    def cover(self) -> str | None:
        if self.image_url:
            return self.image_url
        return (self.image.url if self.image else None) or None


class HardcoverHit(UpstreamModel):
    document: HardcoverDocument


class HardcoverResults(UpstreamModel):
    found: int | None = None
    hits: list[HardcoverHit] = Field(default_factory=list)


class HardcoverSearchField(UpstreamModel):
    # Typesense blob, sometimes double-encoded as a JSON string.
    results: Any = None


class HardcoverSearchData(UpstreamModel):
    search: HardcoverSearchField | None = None


class HardcoverSeriesBook(UpstreamModel):
    image: HardcoverImage | None = None


class HardcoverSeriesRow(UpstreamModel):
    series_id: int | None = None
    book: HardcoverSeriesBook | None = None


class HardcoverSeriesBooks(UpstreamModel):
    book_series: list[HardcoverSeriesRow] = Field(default_factory=list)


# Artwork

class FanartImage(UpstreamModel):
    url: str = ""


class FanartArtist(UpstreamModel):
    artistthumb: list[FanartImage] = Field(default_factory=list)


class WikidataDataValue(UpstreamModel):
    value: Any = None


class WikidataSnak(UpstreamModel):
    datavalue: WikidataDataValue | None = None


class WikidataClaim(UpstreamModel):
    mainsnak: WikidataSnak | None = None


class WikidataClaims(UpstreamModel):
    claims: dict[str, list[WikidataClaim]] | None = None

    def first_value(self, prop: str) -> Any:
        statements = (self.claims or {}).get(prop) or []
        snak = statements[0].mainsnak if statements else None
        return snak.datavalue.value if snak and snak.datavalue else None
