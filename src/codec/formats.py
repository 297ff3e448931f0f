"""Text formats for exporting and importing vocabulary.

Exports:
    json — full structural serialization, camelCase keys, ISO-8601 dates.
    csv  — one row per word; list fields joined by ';', etymology as a JSON string.
    anki — one ``front;back;tags`` line per word, back is an HTML fragment.

Imports (json, csv) only turn the payload into raw record dicts; validation
of each record happens in the caller so a bad record can be skipped alone.
"""

import csv
import io
import json
from dataclasses import asdict
from typing import Any, Iterable

from codec.models import EtymologyRecord, WordRecord
from domain.model.errors import ValidationError, VocabularyImportError
from domain.model.vocabulary import VocabularyWord

EXPORT_FORMATS = ('json', 'csv', 'anki')
IMPORT_FORMATS = ('json', 'csv')

CSV_HEADERS = [
    "id", "word", "translation", "language", "pronunciation",
    "partOfSpeech", "difficulty", "writingFrequency", "speechFrequency",
    "frequencyRank", "categories", "synonyms", "antonyms",
    "etymology", "register", "emotionalConnotation",
]

# Recognized CSV import headers (lowercased) → WordRecord wire key
CSV_IMPORT_COLUMNS = {
    'word': 'word',
    'translation': 'translation',
    'pronunciation': 'pronunciation',
    'part of speech': 'partOfSpeech',
    'partofspeech': 'partOfSpeech',
    'pos': 'partOfSpeech',
    'difficulty': 'difficulty',
    'categories': 'categories',
}

LIST_SEPARATOR = ';'


def _format_number(value: float) -> str:
    """Render 3.0 as "3" and 145.2 as "145.2"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ── Export ───────────────────────────────────────────────────


# Emitted as null when unset.
NULLABLE_JSON_KEYS = ('register', 'emotionalConnotation')


def _json_record(word: VocabularyWord) -> dict:
    record = WordRecord.from_domain(word).model_dump(mode='json', by_alias=True, exclude_none=True)
    for key in NULLABLE_JSON_KEYS:
        record.setdefault(key, None)
    return record


def to_json(words: Iterable[VocabularyWord]) -> str:
    records = [_json_record(w) for w in words]
    return json.dumps(records, indent=2, ensure_ascii=False)


def _csv_row(word: VocabularyWord) -> list[str]:
    etymology = ""
    if word.etymology:
        etymology = json.dumps(
            EtymologyRecord.model_validate(asdict(word.etymology)).model_dump(
                mode='json', by_alias=True, exclude_none=True,
            ),
            ensure_ascii=False,
            separators=(',', ':'),
        )
    return [
        word.id,
        word.word,
        word.translation,
        word.language,
        word.pronunciation or "",
        word.part_of_speech.value,
        word.difficulty.value,
        _format_number(word.frequency.writing_frequency),
        _format_number(word.frequency.speech_frequency),
        str(word.frequency.rank),
        LIST_SEPARATOR.join(word.categories),
        LIST_SEPARATOR.join(word.synonyms),
        LIST_SEPARATOR.join(word.antonyms),
        etymology,
        word.register.value if word.register else "",
        word.emotional_connotation.value if word.emotional_connotation else "",
    ]


def to_csv(words: Iterable[VocabularyWord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(CSV_HEADERS)
    for word in words:
        writer.writerow(_csv_row(word))
    text = buffer.getvalue()
    return text[:-1] if text.endswith('\n') else text


def _anki_back(word: VocabularyWord) -> str:
    back = (
        f"{word.translation}<br><br>"
        f"<i>{word.pronunciation or ''}</i><br>"
        f"Part of Speech: {word.part_of_speech.value}<br>"
        f"Frequency Rank: {word.frequency.rank}<br>"
    )
    if word.synonyms:
        back += f"Synonyms: {', '.join(word.synonyms)}<br>"
    if word.etymology:
        back += f"Etymology: {word.etymology.origin}<br>"
    return back


def to_anki(words: Iterable[VocabularyWord]) -> str:
    lines = []
    for word in words:
        tags = ' '.join([word.language, word.difficulty.value, *word.categories])
        lines.append(f"{word.word};{_anki_back(word)};{tags}")
    return '\n'.join(lines)


_EXPORTERS = {
    'json': to_json,
    'csv': to_csv,
    'anki': to_anki,
}


def export(words: Iterable[VocabularyWord], format: str) -> str:
    """Serialize words. Raises ValidationError for an unsupported format."""
    exporter = _EXPORTERS.get(format)
    if exporter is None:
        raise ValidationError(f"Unsupported export format: {format}")
    return exporter(words)


# ── Import ───────────────────────────────────────────────────


def parse_json(data: str) -> list[Any]:
    try:
        payload = json.loads(data)
    except (TypeError, ValueError) as e:
        raise VocabularyImportError(f"Invalid JSON payload: {e}", format='json') from e
    if not isinstance(payload, list):
        raise VocabularyImportError("JSON payload must be an array of words", format='json')
    return payload


def parse_csv(data: str) -> list[dict[str, Any]]:
    """Parse header-driven CSV into raw word dicts.

    Unrecognized columns are ignored, empty cells are left out and the
    categories cell is split on ';'.
    """
    text = (data or "").strip()
    if not text:
        raise VocabularyImportError("CSV payload is empty", format='csv')
    try:
        reader = csv.reader(io.StringIO(text))
        header = next(reader)
        columns = [CSV_IMPORT_COLUMNS.get(h.strip().lower()) for h in header]
        if 'word' not in columns:
            raise VocabularyImportError("CSV header has no 'word' column", format='csv')

        rows = []
        for values in reader:
            if not any(v.strip() for v in values):
                continue
            row: dict[str, Any] = {}
            for key, value in zip(columns, values):
                value = value.strip()
                if not key or not value:
                    continue
                if key == 'categories':
                    row[key] = [c.strip() for c in value.split(LIST_SEPARATOR) if c.strip()]
                else:
                    row[key] = value
            rows.append(row)
        return rows
    except csv.Error as e:
        raise VocabularyImportError(f"Malformed CSV payload: {e}", format='csv') from e


_PARSERS = {
    'json': parse_json,
    'csv': parse_csv,
}


def parse(data: str, format: str) -> list[Any]:
    """Split a payload into raw records. Raises VocabularyImportError."""
    parser = _PARSERS.get(format)
    if parser is None:
        raise VocabularyImportError(f"Unsupported import format: {format}", format=format)
    return parser(data)
