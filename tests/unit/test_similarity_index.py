import unittest

from transl8.similarity_index import SimilarityIndex, similarity_score, tokenize


class TestTokenize(unittest.TestCase):

    def test_lowercases_and_drops_stop_words(self):
        self.assertEqual(tokenize("Save the Changes to your Profile!"), frozenset({"save", "changes", "profile"}))

    def test_drops_single_character_tokens(self):
        self.assertEqual(tokenize("a b c delete"), frozenset({"delete"}))

    def test_non_alphanumeric_characters_split_words(self):
        self.assertEqual(tokenize("log-in/sign_up"), frozenset({"log", "sign"}))

    def test_keeps_non_latin_words(self):
        self.assertEqual(tokenize("Größe ändern"), frozenset({"größe", "ändern"}))


class TestSimilarityScore(unittest.TestCase):

    def test_jaccard(self):
        a = frozenset({"save", "changes"})
        b = frozenset({"save", "profile", "changes", "now"})
        self.assertAlmostEqual(similarity_score(a, b), 0.5)

    def test_empty_sets_score_zero(self):
        self.assertEqual(similarity_score(frozenset(), frozenset({"x"})), 0.0)
        self.assertEqual(similarity_score(frozenset(), frozenset()), 0.0)

    def test_symmetric_and_bounded(self):
        samples = [
            tokenize("Save changes"),
            tokenize("Save your profile changes now"),
            tokenize("Delete account"),
            tokenize("Account settings and profile"),
            frozenset(),
        ]
        for a in samples:
            for b in samples:
                score = similarity_score(a, b)
                self.assertEqual(score, similarity_score(b, a))
                self.assertGreaterEqual(score, 0.0)
                self.assertLessEqual(score, 1.0)


class TestSimilarityIndex(unittest.TestCase):

    def setUp(self):
        self.source = {
            "profile": {"save": "Save profile changes", "delete": "Delete profile", "name": "Name"},
            "settings": {"save": "Save settings changes", "title": "Settings"},
            "untranslated": "Copied value",
        }
        self.target = {
            "profile": {"save": "Profiländerungen speichern", "delete": "Profil löschen", "name": "Name"},
            "settings": {"title": "Einstellungen"},
            "untranslated": "Copied value",
        }

    def test_build_skips_identical_and_missing_values(self):
        index = SimilarityIndex.build(self.source, self.target)

        self.assertEqual(len(index), 3)
        self.assertEqual(
            {example.key for example in index},
            {"profile.save", "profile.delete", "settings.title"},
        )

    def test_find_similar_orders_by_score(self):
        index = SimilarityIndex.build(self.source, self.target)

        examples = index.find_similar("Save settings changes", "settings.save")

        self.assertEqual(examples[0].key, "profile.save")
        self.assertEqual(examples[0].translated_value, "Profiländerungen speichern")
        self.assertTrue(all(e.key != "settings.save" for e in examples))

    def test_find_similar_excludes_current_key(self):
        index = SimilarityIndex.build(self.source, self.target)

        examples = index.find_similar("Save profile changes", "profile.save")

        self.assertNotIn("profile.save", [e.key for e in examples])

    def test_find_similar_respects_limit_and_threshold(self):
        index = SimilarityIndex.build(self.source, self.target)

        self.assertEqual(index.find_similar("Completely unrelated words", "x"), [])
        self.assertLessEqual(len(index.find_similar("profile settings", "x", limit=1)), 1)

    def test_empty_query_tokens_return_nothing(self):
        index = SimilarityIndex.build(self.source, self.target)

        self.assertEqual(index.find_similar("the a of", "x"), [])


if __name__ == '__main__':
    unittest.main()
