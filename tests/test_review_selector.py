import random
import unittest
from collections import Counter

from roadquiz.review.selector import (
    counts_from_list,
    select_full_review,
    select_mock_exam,
    select_wrong_question_review,
    uniform_ratios,
)

from support import make_questions


def bank():
    # chapter 1: ids 1-10, chapter 2: ids 11-15, chapter 3: ids 21-23
    return make_questions(10, chapter=1, start=1) + make_questions(5, chapter=2, start=11) + make_questions(3, chapter=3, start=21)


class WrongReviewTests(unittest.TestCase):
    def test_floor_of_ratio_per_chapter(self) -> None:
        wrong = {1, 2, 3, 4, 5, 11, 12, 13, 21}
        out = select_wrong_question_review(wrong, bank(), {1: 0.5, 2: 0.5, 3: 1.0}, rng=random.Random(2))
        per = Counter(q.chapter_level for q in out)
        self.assertEqual(per, Counter({1: 2, 2: 1, 3: 1}))
        self.assertTrue({q.id for q in out} <= wrong)
        self.assertEqual(len({q.id for q in out}), len(out))

    def test_full_ratio_takes_all_wrong(self) -> None:
        wrong = {3, 14, 22}
        out = select_wrong_question_review(wrong, bank(), uniform_ratios(3, 1.0), rng=random.Random(0))
        self.assertEqual({q.id for q in out}, wrong)

    def test_missing_ratio_means_zero(self) -> None:
        out = select_wrong_question_review({1, 11}, bank(), {1: 1.0})
        self.assertEqual([q.id for q in out], [1])

    def test_ratio_domain(self) -> None:
        with self.assertRaises(ValueError):
            select_wrong_question_review({1}, bank(), {1: 1.5})
        with self.assertRaises(ValueError):
            select_full_review(bank(), {1: -0.1}, 1)


class FullReviewTests(unittest.TestCase):
    def test_only_unlocked_chapters(self) -> None:
        out = select_full_review(bank(), uniform_ratios(3, 1.0), 2, rng=random.Random(4))
        self.assertEqual(Counter(q.chapter_level for q in out), Counter({1: 10, 2: 5}))

    def test_ratio_sampling(self) -> None:
        out = select_full_review(bank(), uniform_ratios(3, 0.2), 3, rng=random.Random(4))
        # floor(10*.2)=2, floor(5*.2)=1, floor(3*.2)=0
        self.assertEqual(Counter(q.chapter_level for q in out), Counter({1: 2, 2: 1}))


class MockExamTests(unittest.TestCase):
    def test_counts_clipped_to_available(self) -> None:
        counts = counts_from_list([12, 3, 8, 4])
        for seed in range(5):
            out = select_mock_exam(bank(), counts, rng=random.Random(seed))
            per = Counter(q.chapter_level for q in out)
            self.assertEqual(per[1], 10)
            self.assertEqual(per[2], 3)
            self.assertEqual(per[3], 3)
            self.assertEqual(per[4], 0)
            self.assertEqual(len({q.id for q in out}), len(out))

    def test_result_is_shuffled(self) -> None:
        out = select_mock_exam(bank(), {1: 10, 2: 5, 3: 3}, rng=random.Random(9))
        chapters = [q.chapter_level for q in out]
        self.assertNotEqual(chapters, sorted(chapters))

    def test_negative_count_rejected(self) -> None:
        with self.assertRaises(ValueError):
            select_mock_exam(bank(), {1: -1})

    def test_counts_from_list(self) -> None:
        self.assertEqual(counts_from_list([12, 8]), {1: 12, 2: 8})


if __name__ == "__main__":
    unittest.main()
