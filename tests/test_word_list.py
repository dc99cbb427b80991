import tempfile
import unittest
from pathlib import Path

from cluegrid.core.exceptions import WordListLoadError
from cluegrid.data.normalization import clean_word, is_word
from cluegrid.data.word_list import WordList


class NormalizationTests(unittest.TestCase):
    def test_clean_word_strips_accents_and_symbols(self) -> None:
        self.assertEqual(clean_word("Café-au lait"), "CAFEAULAIT")
        self.assertEqual(clean_word(""), "")

    def test_is_word(self) -> None:
        self.assertTrue(is_word("BEACH"))
        self.assertFalse(is_word("beach"))
        self.assertFalse(is_word(""))


class WordListTests(unittest.TestCase):
    def test_membership_is_normalized(self) -> None:
        words = WordList(["beach", "Crane", "x", "a-b"])
        self.assertIn("BEACH", words)
        self.assertTrue(words("crane"))
        self.assertNotIn("X", words)
        self.assertEqual(len(words), 3)

    def test_from_file_reads_first_column(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "words.tsv"
            path.write_text("# guesses\nbeach\t12\n\nshell\n1234\n", encoding="utf-8")
            words = WordList.from_file(path)
        self.assertEqual(len(words), 2)
        self.assertIn("SHELL", words)

    def test_missing_or_empty_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(WordListLoadError):
                WordList.from_file(Path(tmp) / "missing.txt")
            empty = Path(tmp) / "empty.txt"
            empty.write_text("# nothing\n", encoding="utf-8")
            with self.assertRaises(WordListLoadError):
                WordList.from_file(empty)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
