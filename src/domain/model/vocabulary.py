"""Vocabulary domain models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from domain.model.errors import ValidationError

DEFAULT_CORPUS_SIZE = 1_000_000


# ── Closed enumerations ──────────────────────────────────────


class PartOfSpeech(str, Enum):
    NOUN = 'noun'
    VERB = 'verb'
    ADJECTIVE = 'adjective'
    ADVERB = 'adverb'
    PRONOUN = 'pronoun'
    PREPOSITION = 'preposition'
    CONJUNCTION = 'conjunction'
    INTERJECTION = 'interjection'
    ARTICLE = 'article'
    PHRASE = 'phrase'
    MODAL = 'modal'
    AUXILIARY = 'auxiliary'
    DETERMINER = 'determiner'
    QUANTIFIER = 'quantifier'


class DifficultyLevel(str, Enum):
    """Learner-facing difficulty, ordered from easiest to hardest."""
    BEGINNER = 'beginner'
    INTERMEDIATE = 'intermediate'
    ADVANCED = 'advanced'
    NATIVE = 'native'

    @property
    def order(self) -> int:
        return list(DifficultyLevel).index(self)


class FrequencyLevel(str, Enum):
    """Human-readable frequency band derived from a corpus rank."""
    VERY_COMMON = 'very-common'
    COMMON = 'common'
    UNCOMMON = 'uncommon'
    RARE = 'rare'
    ARCHAIC = 'archaic'

    @property
    def order(self) -> int:
        return list(FrequencyLevel).index(self)

    @staticmethod
    def from_rank(rank: int) -> 'FrequencyLevel':
        """Map a frequency rank to its band.

        Rank 0 means "unranked" and maps to COMMON, the default band of a
        freshly created word.

        Examples:
            FrequencyLevel.from_rank(1)      → VERY_COMMON
            FrequencyLevel.from_rank(1000)   → VERY_COMMON
            FrequencyLevel.from_rank(5000)   → COMMON
            FrequencyLevel.from_rank(50001)  → ARCHAIC
        """
        if rank <= 0:
            return FrequencyLevel.COMMON
        if rank <= 1000:
            return FrequencyLevel.VERY_COMMON
        if rank <= 5000:
            return FrequencyLevel.COMMON
        if rank <= 20000:
            return FrequencyLevel.UNCOMMON
        if rank <= 50000:
            return FrequencyLevel.RARE
        return FrequencyLevel.ARCHAIC


class PhraseType(str, Enum):
    PREPOSITIONAL = 'prepositional'
    VERBAL = 'verbal'
    ADVERBIAL = 'adverbial'
    ADJECTIVAL = 'adjectival'
    FIXED_EXPRESSION = 'fixed-expression'
    COLLOQUIAL = 'colloquial'
    FORMAL = 'formal'


class RegisterLevel(str, Enum):
    VERY_FORMAL = 'very-formal'
    FORMAL = 'formal'
    NEUTRAL = 'neutral'
    INFORMAL = 'informal'
    VERY_INFORMAL = 'very-informal'
    SLANG = 'slang'
    ARCHAIC = 'archaic'
    TECHNICAL = 'technical'
    ACADEMIC = 'academic'


class EmotionalConnotation(str, Enum):
    VERY_POSITIVE = 'very-positive'
    POSITIVE = 'positive'
    NEUTRAL = 'neutral'
    NEGATIVE = 'negative'
    VERY_NEGATIVE = 'very-negative'
    OFFENSIVE = 'offensive'
    EUPHEMISTIC = 'euphemistic'


class CollocationStrength(str, Enum):
    VERY_STRONG = 'very-strong'
    STRONG = 'strong'
    MODERATE = 'moderate'
    WEAK = 'weak'
    OCCASIONAL = 'occasional'


class InflectionType(str, Enum):
    PLURAL = 'plural'
    SINGULAR = 'singular'
    PAST_TENSE = 'past-tense'
    PRESENT_TENSE = 'present-tense'
    FUTURE_TENSE = 'future-tense'
    PAST_PARTICIPLE = 'past-participle'
    PRESENT_PARTICIPLE = 'present-participle'
    COMPARATIVE = 'comparative'
    SUPERLATIVE = 'superlative'
    POSSESSIVE = 'possessive'
    GERUND = 'gerund'
    INFINITIVE = 'infinitive'


# ── Value Objects ────────────────────────────────────────────


@dataclass(frozen=True)
class FrequencyData:
    """Corpus frequency of a word.

    Attributes:
        writing_frequency: Occurrences per million words of written text.
        speech_frequency: Occurrences per million words of spoken text.
        rank: Position in the frequency-ordered list (1 = most common, 0 = unranked).
        corpus_size: Size of the corpus the figures were computed on.
        last_updated: When the figures were last refreshed.
    """
    writing_frequency: float = 0.0
    speech_frequency: float = 0.0
    rank: int = 0
    corpus_size: int | None = DEFAULT_CORPUS_SIZE
    last_updated: datetime | None = None

    def __post_init__(self) -> None:
        if self.rank < 0:
            raise ValidationError(f"Frequency rank must be non-negative, got {self.rank}")

    @property
    def level(self) -> FrequencyLevel:
        return FrequencyLevel.from_rank(self.rank)


@dataclass(frozen=True)
class Example:
    """Usage example with its gloss."""
    sentence: str
    translation: str
    context: str | None = None
    source: str | None = None
    difficulty: DifficultyLevel | None = None


@dataclass(frozen=True)
class Etymology:
    origin: str
    meaning_evolution: str = ""
    original_form: str | None = None
    first_known_use: str | None = None
    related_words: list[str] = field(default_factory=list)
    linguistic_family: str | None = None


@dataclass(frozen=True)
class Idiom:
    id: str
    phrase: str
    meaning: str
    usage: str = ""
    example: str = ""
    translation: str = ""
    difficulty: DifficultyLevel = DifficultyLevel.BEGINNER
    cultural_significance: str | None = None


@dataclass(frozen=True)
class Phrase:
    id: str
    phrase: str
    type: PhraseType
    meaning: str
    usage: str = ""
    example: str = ""
    translation: str = ""
    register: RegisterLevel = RegisterLevel.NEUTRAL


@dataclass(frozen=True)
class Collocation:
    """Habitual word pairing with its co-occurrence strength."""
    id: str
    phrase: str
    type: CollocationStrength
    frequency: float = 0.0
    example: str = ""
    translation: str = ""
    notes: str | None = None


@dataclass(frozen=True)
class Inflection:
    form: str
    type: InflectionType
    usage: str = ""
    example: str | None = None


@dataclass(frozen=True)
class DerivedForm:
    word: str
    part_of_speech: PartOfSpeech
    meaning: str = ""
    morphological_process: str = ""


@dataclass(frozen=True)
class MorphologyData:
    root: str | None = None
    prefix: list[str] = field(default_factory=list)
    suffix: list[str] = field(default_factory=list)
    inflections: list[Inflection] = field(default_factory=list)
    derived_forms: list[DerivedForm] = field(default_factory=list)


@dataclass(frozen=True)
class CulturalContext:
    context: str
    significance: str = ""
    usage: str = ""
    region: str | None = None
    time_period: str | None = None
    examples: list[str] = field(default_factory=list)


# ── VocabularyWord Domain Model ──────────────────────────────


@dataclass
class VocabularyWord:
    """A word collected by the learner, with its linguistic metadata."""

    REQUIRED_FIELDS = ('id', 'word', 'translation', 'language')

    id: str
    word: str
    translation: str
    language: str
    date_added: datetime
    date_modified: datetime
    part_of_speech: PartOfSpeech = PartOfSpeech.NOUN
    difficulty: DifficultyLevel = DifficultyLevel.BEGINNER
    frequency: FrequencyData = field(default_factory=FrequencyData)
    pronunciation: str | None = None
    categories: list[str] = field(default_factory=list)
    examples: list[Example] = field(default_factory=list)
    synonyms: list[str] = field(default_factory=list)
    antonyms: list[str] = field(default_factory=list)
    etymology: Etymology | None = None
    idioms: list[Idiom] = field(default_factory=list)
    phrases: list[Phrase] = field(default_factory=list)
    collocations: list[Collocation] = field(default_factory=list)
    notes: str | None = None
    is_favorite: bool = False
    audio_url: str | None = None
    image_url: str | None = None
    morphology: MorphologyData | None = None
    semantic_field: list[str] = field(default_factory=list)
    register: RegisterLevel | None = RegisterLevel.NEUTRAL
    emotional_connotation: EmotionalConnotation | None = EmotionalConnotation.NEUTRAL
    cultural_context: list[CulturalContext] = field(default_factory=list)

    # ── factory ───────────────────────────────────────────

    @staticmethod
    def create(
        word: str,
        translation: str,
        language: str,
        now: datetime | None = None,
        **attributes,
    ) -> 'VocabularyWord':
        """Create a word with a fresh id, timestamps and default collections.

        Omitted optional lists are always empty lists, never None. Any other
        VocabularyWord field may be passed through ``attributes``; an
        explicit ``id`` keeps that identity instead of generating one.
        """
        now = now or datetime.now(timezone.utc)
        word_id = attributes.pop('id', None) or str(uuid.uuid4())
        if attributes.get('frequency') is None:
            attributes['frequency'] = FrequencyData(last_updated=now)
        for name, value in list(attributes.items()):
            if value is None and name in _LIST_FIELDS:
                del attributes[name]
        return VocabularyWord(
            id=word_id,
            word=word,
            translation=translation,
            language=language,
            date_added=now,
            date_modified=now,
            **attributes,
        )

    # ── queries ───────────────────────────────────────────

    def missing_required_fields(self) -> list[str]:
        return [name for name in self.REQUIRED_FIELDS if not getattr(self, name)]

    # ── state transitions ─────────────────────────────────

    def mark_modified(self, now: datetime) -> None:
        """Refresh date_modified, never moving it before date_added."""
        self.date_modified = max(now, self.date_added)


_LIST_FIELDS = frozenset({
    'categories', 'examples', 'synonyms', 'antonyms', 'idioms', 'phrases',
    'collocations', 'semantic_field', 'cultural_context',
})
