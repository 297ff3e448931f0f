"""Pydantic models for the import/export wire formats.

Field names are snake_case in Python and camelCase on the wire
(``partOfSpeech``, ``dateAdded``, ...). Both spellings are accepted on input.
"""

import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from domain.model.review import ReviewSession, SpacedRepetitionCard
from domain.model.vocabulary import (
    DEFAULT_CORPUS_SIZE,
    Collocation,
    CollocationStrength,
    CulturalContext,
    DerivedForm,
    DifficultyLevel,
    EmotionalConnotation,
    Etymology,
    Example,
    FrequencyData,
    FrequencyLevel,
    Idiom,
    Inflection,
    InflectionType,
    MorphologyData,
    PartOfSpeech,
    Phrase,
    PhraseType,
    RegisterLevel,
    VocabularyWord,
)


def _new_id() -> str:
    return str(uuid.uuid4())


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class WireModel(BaseModel):
    """Base model: camelCase aliases, population by field name allowed."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Word sub-records ─────────────────────────────────────────


class FrequencyRecord(WireModel):
    writing_frequency: float = 0.0
    speech_frequency: float = 0.0
    rank: int = Field(0, ge=0)
    level: Optional[FrequencyLevel] = Field(None, description="Derived from rank; ignored on input")
    corpus_size: Optional[int] = DEFAULT_CORPUS_SIZE
    last_updated: Optional[datetime] = None

    def to_domain(self) -> FrequencyData:
        return FrequencyData(
            writing_frequency=self.writing_frequency,
            speech_frequency=self.speech_frequency,
            rank=self.rank,
            corpus_size=self.corpus_size,
            last_updated=as_utc(self.last_updated),
        )


class ExampleRecord(WireModel):
    sentence: str
    translation: str = ""
    context: Optional[str] = None
    source: Optional[str] = None
    difficulty: Optional[DifficultyLevel] = None

    def to_domain(self) -> Example:
        return Example(**self.model_dump())


class EtymologyRecord(WireModel):
    origin: str
    meaning_evolution: str = ""
    original_form: Optional[str] = None
    first_known_use: Optional[str] = None
    related_words: list[str] = Field(default_factory=list)
    linguistic_family: Optional[str] = None

    def to_domain(self) -> Etymology:
        return Etymology(**self.model_dump())


class IdiomRecord(WireModel):
    id: str = Field(default_factory=_new_id)
    phrase: str
    meaning: str
    usage: str = ""
    example: str = ""
    translation: str = ""
    difficulty: DifficultyLevel = DifficultyLevel.BEGINNER
    cultural_significance: Optional[str] = None

    def to_domain(self) -> Idiom:
        return Idiom(**self.model_dump())


class PhraseRecord(WireModel):
    id: str = Field(default_factory=_new_id)
    phrase: str
    type: PhraseType
    meaning: str
    usage: str = ""
    example: str = ""
    translation: str = ""
    register_level: RegisterLevel = Field(RegisterLevel.NEUTRAL, alias='register')

    def to_domain(self) -> Phrase:
        data = self.model_dump()
        data['register'] = data.pop('register_level')
        return Phrase(**data)


class CollocationRecord(WireModel):
    id: str = Field(default_factory=_new_id)
    phrase: str
    type: CollocationStrength
    frequency: float = 0.0
    example: str = ""
    translation: str = ""
    notes: Optional[str] = None

    def to_domain(self) -> Collocation:
        return Collocation(**self.model_dump())


class InflectionRecord(WireModel):
    form: str
    type: InflectionType
    usage: str = ""
    example: Optional[str] = None


class DerivedFormRecord(WireModel):
    word: str
    part_of_speech: PartOfSpeech
    meaning: str = ""
    morphological_process: str = ""


class MorphologyRecord(WireModel):
    root: Optional[str] = None
    prefix: list[str] = Field(default_factory=list)
    suffix: list[str] = Field(default_factory=list)
    inflections: list[InflectionRecord] = Field(default_factory=list)
    derived_forms: list[DerivedFormRecord] = Field(default_factory=list)

    def to_domain(self) -> MorphologyData:
        return MorphologyData(
            root=self.root,
            prefix=list(self.prefix),
            suffix=list(self.suffix),
            inflections=[Inflection(**i.model_dump()) for i in self.inflections],
            derived_forms=[DerivedForm(**d.model_dump()) for d in self.derived_forms],
        )


class CulturalContextRecord(WireModel):
    context: str
    significance: str = ""
    usage: str = ""
    region: Optional[str] = None
    time_period: Optional[str] = None
    examples: list[str] = Field(default_factory=list)

    def to_domain(self) -> CulturalContext:
        return CulturalContext(**self.model_dump())


# ── Word ─────────────────────────────────────────────────────


class WordRecord(WireModel):
    """A vocabulary word as exchanged in JSON exports and imports."""
    id: Optional[str] = None
    word: str = Field(..., min_length=1)
    translation: str = Field(..., min_length=1)
    language: Optional[str] = None
    pronunciation: Optional[str] = None
    part_of_speech: PartOfSpeech = PartOfSpeech.NOUN
    difficulty: DifficultyLevel = DifficultyLevel.BEGINNER
    frequency: Optional[FrequencyRecord] = None
    categories: list[str] = Field(default_factory=list)
    examples: list[ExampleRecord] = Field(default_factory=list)
    synonyms: list[str] = Field(default_factory=list)
    antonyms: list[str] = Field(default_factory=list)
    etymology: Optional[EtymologyRecord] = None
    idioms: list[IdiomRecord] = Field(default_factory=list)
    phrases: list[PhraseRecord] = Field(default_factory=list)
    collocations: list[CollocationRecord] = Field(default_factory=list)
    notes: Optional[str] = None
    is_favorite: bool = False
    date_added: Optional[datetime] = None
    date_modified: Optional[datetime] = None
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    morphology: Optional[MorphologyRecord] = None
    semantic_field: list[str] = Field(default_factory=list)
    register_level: Optional[RegisterLevel] = Field(None, alias='register')
    emotional_connotation: Optional[EmotionalConnotation] = None
    cultural_context: list[CulturalContextRecord] = Field(default_factory=list)

    @field_validator('frequency', mode='before')
    @classmethod
    def drop_bare_frequency_level(cls, v):
        """Older exports stored a bare level string ("very-common") instead of frequency data."""
        if isinstance(v, str):
            return None
        return v

    @field_validator('categories', 'synonyms', 'antonyms', 'semantic_field', mode='before')
    @classmethod
    def none_as_empty(cls, v):
        return [] if v is None else v

    @classmethod
    def from_domain(cls, word: VocabularyWord) -> 'WordRecord':
        data = asdict(word)
        data['frequency']['level'] = word.frequency.level
        return cls.model_validate(data)

    def to_domain(self, language: str | None = None, word_id: str | None = None,
                  now: datetime | None = None) -> VocabularyWord:
        """Build a domain word.

        ``language`` and ``word_id`` override the record's own values; imported
        words get a fresh identity in the target language.
        """
        now = now or datetime.now(timezone.utc)
        word = VocabularyWord.create(
            word=self.word,
            translation=self.translation,
            language=language or self.language or "",
            now=now,
            id=word_id,
            pronunciation=self.pronunciation,
            part_of_speech=self.part_of_speech,
            difficulty=self.difficulty,
            frequency=self.frequency.to_domain() if self.frequency else None,
            categories=list(self.categories),
            examples=[e.to_domain() for e in self.examples],
            synonyms=list(self.synonyms),
            antonyms=list(self.antonyms),
            etymology=self.etymology.to_domain() if self.etymology else None,
            idioms=[i.to_domain() for i in self.idioms],
            phrases=[p.to_domain() for p in self.phrases],
            collocations=[c.to_domain() for c in self.collocations],
            notes=self.notes,
            is_favorite=self.is_favorite,
            audio_url=self.audio_url,
            image_url=self.image_url,
            morphology=self.morphology.to_domain() if self.morphology else None,
            semantic_field=list(self.semantic_field),
            cultural_context=[c.to_domain() for c in self.cultural_context],
        )
        # an explicit null clears the default, an absent key keeps it
        if 'register_level' in self.model_fields_set:
            word.register = self.register_level
        if 'emotional_connotation' in self.model_fields_set:
            word.emotional_connotation = self.emotional_connotation
        if self.date_added is not None:
            word.date_added = as_utc(self.date_added)
            word.date_modified = max(as_utc(self.date_modified or self.date_added), word.date_added)
        return word


# ── Study records ────────────────────────────────────────────


class CardRecord(WireModel):
    """Persisted form of a SpacedRepetitionCard."""
    id: str
    word: str
    translation: str
    ease_factor: float = Field(..., ge=1.3)
    interval: int = Field(..., ge=1)
    repetition: int = Field(..., ge=0)
    next_review_date: datetime
    last_review_date: datetime
    quality: float = Field(0, ge=0, le=5)

    @classmethod
    def from_domain(cls, card: SpacedRepetitionCard) -> 'CardRecord':
        return cls.model_validate(asdict(card))

    def to_domain(self) -> SpacedRepetitionCard:
        data = self.model_dump()
        data['next_review_date'] = as_utc(self.next_review_date)
        data['last_review_date'] = as_utc(self.last_review_date)
        return SpacedRepetitionCard(**data)


class ReviewSessionRecord(WireModel):
    card_id: str
    quality: float = Field(..., ge=0, le=5)
    response_time: int = Field(0, ge=0)
    timestamp: datetime

    @classmethod
    def from_domain(cls, session: ReviewSession) -> 'ReviewSessionRecord':
        return cls.model_validate(asdict(session))

    def to_domain(self) -> ReviewSession:
        return ReviewSession(
            card_id=self.card_id,
            quality=self.quality,
            response_time=self.response_time,
            timestamp=as_utc(self.timestamp),
        )


class StudyDocument(WireModel):
    """On-disk layout of the JSON study file."""
    cards: list[CardRecord] = Field(default_factory=list)
    sessions: list[ReviewSessionRecord] = Field(default_factory=list)
