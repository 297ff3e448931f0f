"""End-to-end tests for the command-line entry point against a temporary study file."""

import io
import json
import logging
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from adapter.fake.clock import FakeClock
from cli.main import main

WORDS_JSON = json.dumps([
    {'word': 'hola', 'translation': 'hello', 'categories': ['greetings'],
     'frequency': {'rank': 40}, 'etymology': {'origin': 'Arabic'}},
    {'word': 'perro', 'translation': 'dog', 'partOfSpeech': 'noun'},
])


class TestCli(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)
        self.store = str(self.dir / 'study.json')
        self.clock = FakeClock()
        root = logging.getLogger()
        self._handlers = root.handlers[:]
        self._level = root.level

    def tearDown(self):
        root = logging.getLogger()
        root.handlers = self._handlers
        root.setLevel(self._level)
        self.tmp.cleanup()

    def run_cli(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(['--store', self.store, '--log-level', 'critical', *argv], clock=self.clock)
        return code, out.getvalue(), err.getvalue()

    # ── study commands ────────────────────────────────────────

    def test_add_card_review_and_due(self):
        code, out, _ = self.run_cli('add-card', 'hola', 'hello', '--id', 'w1')
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)['id'], 'w1')

        _, out, _ = self.run_cli('due')
        self.assertEqual([c['id'] for c in json.loads(out)], ['w1'])

        code, out, _ = self.run_cli('review', 'w1', '5', '--response-time', '1200')
        self.assertEqual(code, 0)
        card = json.loads(out)
        self.assertEqual(card['interval'], 1)
        self.assertEqual(card['repetition'], 1)

        _, out, _ = self.run_cli('due')
        self.assertEqual(json.loads(out), [])

    def test_upcoming(self):
        self.run_cli('add-card', 'hola', 'hello')
        self.run_cli('review', 'hola', '4')

        _, out, _ = self.run_cli('upcoming', '--days', '3')
        self.assertEqual([day['count'] for day in json.loads(out)], [0, 1, 0])

    def test_stats(self):
        self.run_cli('add-card', 'hola', 'hello')
        self.run_cli('review', 'hola', '2')

        _, out, _ = self.run_cli('stats')
        result = json.loads(out)
        self.assertEqual(result['study']['total_cards'], 1)
        self.assertEqual(result['study']['retention_rate'], 0)
        self.assertEqual(result['patterns']['weekly_progress'][-1]['total'], 1)
        self.assertNotIn('words', result)

    def test_stats_with_word_list(self):
        words = self.dir / 'words.json'
        words.write_text(WORDS_JSON, encoding='utf-8')

        _, out, _ = self.run_cli('stats', '--words', str(words), '--language', 'spanish')
        result = json.loads(out)
        self.assertEqual(result['words']['total_words'], 2)
        self.assertEqual(result['words']['etymology_origins'], {'Arabic': 1})

    def test_review_unknown_card_fails(self):
        code, out, err = self.run_cli('review', 'missing', '4')
        self.assertEqual(code, 1)
        self.assertEqual(out, '')
        self.assertIn('not found', err)

    def test_review_invalid_quality_fails(self):
        self.run_cli('add-card', 'hola', 'hello')
        code, _, err = self.run_cli('review', 'hola', '9')
        self.assertEqual(code, 1)
        self.assertIn('Quality', err)

    # ── convert ───────────────────────────────────────────────

    def test_convert_json_to_anki(self):
        words = self.dir / 'words.json'
        words.write_text(WORDS_JSON, encoding='utf-8')

        code, out, _ = self.run_cli('convert', str(words), '--to', 'anki', '--language', 'spanish')
        self.assertEqual(code, 0)
        lines = out.strip().split('\n')
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith('hola;hello<br>'))
        self.assertTrue(lines[0].endswith(';spanish beginner greetings'))

    def test_convert_csv_to_json_file(self):
        source = self.dir / 'words.csv'
        source.write_text('word,translation,pos\ncorrer,to run,verb\n', encoding='utf-8')
        target = self.dir / 'out.json'

        code, out, _ = self.run_cli('convert', str(source), '--from', 'csv', '--language', 'spanish',
                                    '-o', str(target))
        self.assertEqual(code, 0)
        self.assertEqual(out, '')
        records = json.loads(target.read_text(encoding='utf-8'))
        self.assertEqual(records[0]['partOfSpeech'], 'verb')
        self.assertEqual(records[0]['language'], 'spanish')

    def test_convert_missing_input_fails(self):
        code, _, err = self.run_cli('convert', str(self.dir / 'nope.json'), '--language', 'spanish')
        self.assertEqual(code, 1)
        self.assertIn('error', err)

    def test_convert_latin1_csv_fails(self):
        source = self.dir / 'words.csv'
        source.write_bytes('word,translation\ncafé,coffee\n'.encode('latin-1'))

        code, out, err = self.run_cli('convert', str(source), '--from', 'csv', '--language', 'spanish')
        self.assertEqual(code, 1)
        self.assertEqual(out, '')
        self.assertIn('not valid UTF-8', err)

    def test_unreadable_store_fails(self):
        Path(self.store).parent.mkdir(parents=True, exist_ok=True)
        Path(self.store).write_bytes(b'\xff\xfe')

        code, _, err = self.run_cli('due')
        self.assertEqual(code, 1)
        self.assertIn('error', err)


if __name__ == '__main__':
    unittest.main()
