"""Unit tests for the in-memory VocabularyStore — CRUD, indexes, queries, frequency updates and statistics."""

import unittest
from datetime import timedelta

from adapter.fake.clock import FakeClock
from adapter.memory.vocabulary_store import VocabularyStore
from domain.model.errors import ValidationError
from domain.model.vocabulary import (
    Collocation,
    CollocationStrength,
    DerivedForm,
    DifficultyLevel,
    EmotionalConnotation,
    Etymology,
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


class StoreTestCase(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.store = VocabularyStore(clock=self.clock)

    def add(self, word, translation, language='spanish', **attributes):
        entry = VocabularyWord.create(word, translation, language, now=self.clock.now(), **attributes)
        self.store.add_word(entry)
        return entry


class TestCrud(StoreTestCase):

    def test_add_and_get(self):
        hola = self.add('hola', 'hello')

        self.assertIs(self.store.get_word(hola.id), hola)
        self.assertEqual(len(self.store), 1)
        self.assertIn(hola.id, self.store)

    def test_get_unknown_returns_none(self):
        self.assertIsNone(self.store.get_word('missing'))

    def test_add_rejects_missing_required_fields(self):
        word = VocabularyWord.create('hola', '', 'spanish', now=self.clock.now())
        with self.assertRaises(ValidationError):
            self.store.add_word(word)
        self.assertEqual(len(self.store), 0)

    def test_add_same_id_replaces_and_reindexes(self):
        first = self.add('hola', 'hello', id='w1', categories=['greetings'])
        self.add('hallo', 'hello', language='german', id='w1', categories=['basics'])

        self.assertEqual(len(self.store), 1)
        self.assertEqual(self.store.get_word('w1').word, 'hallo')
        self.assertEqual(self.store.list_words('spanish'), [])
        self.assertEqual(self.store.get_words_by_category('greetings'), [])
        self.assertEqual([w.id for w in self.store.get_words_by_category('basics')], [first.id])

    def test_list_words_insertion_order(self):
        a = self.add('uno', 'one')
        b = self.add('eins', 'one', language='german')
        c = self.add('dos', 'two')

        self.assertEqual(self.store.list_words(), [a, b, c])
        self.assertEqual(self.store.list_words('spanish'), [a, c])
        self.assertEqual(self.store.list_words('french'), [])
        self.assertEqual(self.store.languages(), ['german', 'spanish'])

    def test_update_word_reindexes_and_touches_modified(self):
        word = self.add('hola', 'hello', categories=['greetings'])
        self.clock.advance(hours=2)

        updated = self.store.update_word(word.id, categories=['basics'], difficulty='advanced')

        self.assertEqual(updated.difficulty, DifficultyLevel.ADVANCED)
        self.assertEqual(updated.date_modified, self.clock.now())
        self.assertEqual(self.store.get_words_by_category('greetings'), [])
        self.assertEqual(self.store.get_words_by_category('basics'), [word])
        self.assertEqual(self.store.categories('spanish'), ['basics'])

    def test_update_word_rejects_bad_changes(self):
        word = self.add('hola', 'hello')
        with self.assertRaises(ValidationError):
            self.store.update_word(word.id, id='other')
        with self.assertRaises(ValidationError):
            self.store.update_word(word.id, part_of_speech='gerundive')
        with self.assertRaises(ValidationError):
            self.store.update_word(word.id, translation='')
        self.assertEqual(self.store.get_word(word.id).translation, 'hello')

    def test_update_unknown_returns_none(self):
        self.assertIsNone(self.store.update_word('missing', notes='x'))

    def test_set_favorite(self):
        word = self.add('hola', 'hello')
        self.assertTrue(self.store.set_favorite(word.id).is_favorite)
        self.assertFalse(self.store.set_favorite(word.id, False).is_favorite)


class TestQueries(StoreTestCase):

    def setUp(self):
        super().setUp()
        self.casa = self.add(
            'casa', 'house', categories=['home'], synonyms=['hogar'],
            frequency=FrequencyData(rank=250),
            etymology=Etymology(origin='Latin', meaning_evolution='from casa, a hut'),
        )
        self.perro = self.add(
            'perro', 'dog', categories=['animals'],
            frequency=FrequencyData(rank=1200),
            idioms=[Idiom(id='i1', phrase='de perros', meaning='terrible')],
        )
        self.gato = self.add(
            'gato', 'cat', categories=['animals'],
            frequency=FrequencyData(rank=900),
            phrases=[Phrase(id='p1', phrase='dar gato por liebre', type=PhraseType.FIXED_EXPRESSION,
                            meaning='to swindle')],
            collocations=[Collocation(id='c1', phrase='gato negro', type=CollocationStrength.STRONG)],
        )
        self.nuevo = self.add('nuevo', 'new')
        self.katze = self.add(
            'Katze', 'cat', language='german', categories=['animals'],
            frequency=FrequencyData(rank=3),
            etymology=Etymology(origin='Late Latin'),
        )

    def test_search_default_fields(self):
        self.assertEqual(self.store.search_words('CAT'), [self.gato, self.katze])
        self.assertEqual(self.store.search_words('cat', language='spanish'), [self.gato])
        self.assertEqual(self.store.search_words('hogar'), [self.casa])
        self.assertEqual(self.store.search_words('anim'), [self.perro, self.gato, self.katze])

    def test_search_optional_fields(self):
        self.assertEqual(self.store.search_words('hut'), [])
        self.assertEqual(self.store.search_words('hut', include_etymology=True), [self.casa])
        self.assertEqual(self.store.search_words('terrible'), [])
        self.assertEqual(self.store.search_words('terrible', include_idioms=True), [self.perro])
        self.assertEqual(self.store.search_words('swindle', include_phrases=True), [self.gato])

    def test_most_frequent_words(self):
        result = self.store.get_most_frequent_words('spanish', limit=2)
        self.assertEqual(result, [self.casa, self.gato])
        self.assertEqual(self.store.get_most_frequent_words('spanish'), [self.casa, self.gato, self.perro])
        self.assertEqual(self.store.get_most_frequent_words('spanish', limit=0), [])

    def test_frequency_range_excludes_unranked(self):
        result = self.store.get_words_by_frequency_range('spanish', 1, 1000)
        self.assertEqual(result, [self.casa, self.gato])
        for word in result:
            self.assertTrue(1 <= word.frequency.rank <= 1000)

    def test_words_by_etymology(self):
        self.assertEqual(self.store.get_words_by_etymology('latin'), [self.casa, self.katze])
        self.assertEqual(self.store.get_words_by_etymology('latin', language='german'), [self.katze])

    def test_words_by_category(self):
        self.assertEqual(self.store.get_words_by_category('animals'), [self.perro, self.gato, self.katze])
        self.assertEqual(self.store.get_words_by_category('animals', language='german'), [self.katze])
        self.assertEqual(self.store.categories(), ['animals', 'home'])

    def test_sub_record_accessors(self):
        self.assertEqual([i.id for i in self.store.get_idioms_for_word(self.perro.id)], ['i1'])
        self.assertEqual([p.id for p in self.store.get_phrases_for_word(self.gato.id)], ['p1'])
        self.assertEqual([c.id for c in self.store.get_collocations_for_word(self.gato.id)], ['c1'])
        self.assertEqual(self.store.get_idioms_for_word('missing'), [])


class TestUpdateWordFrequencies(StoreTestCase):

    def test_updates_matching_words_and_rank_index(self):
        casa = self.add('Casa', 'house', frequency=FrequencyData(rank=9000))
        perro = self.add('perro', 'dog', frequency=FrequencyData(rank=400))
        self.clock.advance(days=1)

        count = self.store.update_word_frequencies({
            'casa': {'writingFreq': 512.5, 'speechFreq': 300, 'rank': 120},
            'unknown': {'rank': 5},
        })

        self.assertEqual(count, 1)
        self.assertEqual(casa.frequency.rank, 120)
        self.assertEqual(casa.frequency.writing_frequency, 512.5)
        self.assertEqual(casa.frequency.level, FrequencyLevel.VERY_COMMON)
        self.assertEqual(casa.frequency.last_updated, self.clock.now())
        self.assertEqual(casa.date_modified, self.clock.now())
        self.assertEqual(perro.frequency.rank, 400)
        self.assertEqual(self.store.get_most_frequent_words('spanish'), [casa, perro])

    def test_partial_entry_keeps_other_figures(self):
        casa = self.add('casa', 'house', frequency=FrequencyData(writing_frequency=10, rank=3000))
        self.store.update_word_frequencies({'casa': {'rank': 20}})
        self.assertEqual(casa.frequency.writing_frequency, 10)
        self.assertEqual(casa.frequency.rank, 20)

    def test_invalid_entry_skipped(self):
        casa = self.add('casa', 'house', frequency=FrequencyData(rank=3000))
        count = self.store.update_word_frequencies({'casa': {'rank': -4}})
        self.assertEqual(count, 0)
        self.assertEqual(casa.frequency.rank, 3000)


class TestWordStatistics(StoreTestCase):

    def test_empty_store(self):
        stats = self.store.get_word_statistics()
        self.assertEqual(stats.total_words, 0)
        self.assertEqual(stats.average_frequency_rank, 0)

    def test_aggregates(self):
        self.add(
            'casa', 'house', frequency=FrequencyData(rank=100),
            etymology=Etymology(origin='Latin'),
            register=RegisterLevel.NEUTRAL,
            idioms=[Idiom(id='i1', phrase='como en casa', meaning='at home')],
            morphology=MorphologyData(
                root='cas', suffix=['-a'],
                inflections=[Inflection(form='casas', type=InflectionType.PLURAL)],
            ),
        )
        self.add(
            'deshacer', 'to undo', frequency=FrequencyData(rank=300),
            part_of_speech=PartOfSpeech.VERB,
            etymology=Etymology(origin='Latin'),
            register=RegisterLevel.FORMAL,
            emotional_connotation=EmotionalConnotation.NEGATIVE,
            morphology=MorphologyData(
                root='hacer', prefix=['des-'],
                derived_forms=[DerivedForm(word='deshecho', part_of_speech=PartOfSpeech.ADJECTIVE)],
            ),
        )
        self.add('nuevo', 'new')
        self.add('neu', 'new', language='german', frequency=FrequencyData(rank=5000))

        stats = self.store.get_word_statistics('spanish')

        self.assertEqual(stats.total_words, 3)
        self.assertEqual(stats.average_frequency_rank, 200)
        self.assertEqual(stats.etymology_origins, {'Latin': 2})
        self.assertEqual(stats.register_distribution, {'neutral': 2, 'formal': 1})
        self.assertEqual(stats.emotional_distribution, {'neutral': 2, 'negative': 1})
        self.assertEqual(stats.total_idioms, 1)
        self.assertEqual(stats.morphology.words_with_inflections, 1)
        self.assertEqual(stats.morphology.words_with_derived_forms, 1)
        self.assertEqual(stats.morphology.common_prefixes, {'des-': 1})
        self.assertEqual(stats.morphology.common_suffixes, {'-a': 1})

        self.assertEqual(self.store.get_word_statistics().total_words, 4)


class TestImportExport(StoreTestCase):

    def test_json_round_trip_into_fresh_store(self):
        self.add('hola', 'hello', categories=['greetings'], part_of_speech=PartOfSpeech.INTERJECTION)
        self.add('correr', 'to run', categories=['sport', 'verbs'], part_of_speech=PartOfSpeech.VERB)

        exported = self.store.export_words('json')
        fresh = VocabularyStore(clock=FakeClock(self.clock.now() + timedelta(days=1)))
        self.assertEqual(fresh.import_words(exported, 'json', 'spanish'), 2)

        def key(w):
            return (w.word, w.translation, tuple(w.categories), w.part_of_speech)

        self.assertEqual([key(w) for w in fresh.list_words()], [key(w) for w in self.store.list_words()])
        self.assertNotEqual(
            {w.id for w in fresh.list_words()},
            {w.id for w in self.store.list_words()},
        )

    def test_import_assigns_language(self):
        self.store.import_words('[{"word": "chat", "translation": "cat"}]', 'json', 'french')
        self.assertEqual(self.store.list_words()[0].language, 'french')
        self.assertEqual(self.store.categories('french'), [])

    def test_import_skips_malformed_records(self):
        data = (
            '[{"word": "uno", "translation": "one"},'
            ' {"word": "dos"},'
            ' {"word": "tres", "translation": "three", "partOfSpeech": "gerundive"},'
            ' "not an object",'
            ' {"word": "cuatro", "translation": "four", "difficulty": "advanced"}]'
        )
        self.assertEqual(self.store.import_words(data, 'json', 'spanish'), 2)
        self.assertEqual([w.word for w in self.store.list_words()], ['uno', 'cuatro'])

    def test_import_invalid_payload_returns_zero(self):
        self.assertEqual(self.store.import_words('{not json', 'json', 'spanish'), 0)
        self.assertEqual(self.store.import_words('{"word": "uno"}', 'json', 'spanish'), 0)
        self.assertEqual(self.store.import_words('', 'csv', 'spanish'), 0)
        self.assertEqual(self.store.import_words('uno', 'xml', 'spanish'), 0)
        self.assertEqual(len(self.store), 0)

    def test_import_csv(self):
        data = (
            'Word,Translation,POS,Categories,Notes\n'
            'perro,dog,noun,animals;pets,ignored\n'
            '\n'
            'correr,to run,verb,,\n'
            ',missing word,noun,,\n'
        )
        self.assertEqual(self.store.import_words(data, 'csv', 'spanish'), 2)
        perro, correr = self.store.list_words()
        self.assertEqual(perro.categories, ['animals', 'pets'])
        self.assertEqual(correr.part_of_speech, PartOfSpeech.VERB)
        self.assertEqual(correr.categories, [])

    def test_export_language_filter_and_unsupported_format(self):
        self.add('hola', 'hello')
        self.add('hallo', 'hello', language='german')

        self.assertEqual(self.store.export_words('anki', language='german').count('\n'), 0)
        self.assertTrue(self.store.export_words('anki', language='german').startswith('hallo;'))
        with self.assertRaises(ValidationError):
            self.store.export_words('xml')


if __name__ == '__main__':
    unittest.main()
