import unittest

from roadquiz.errors import OutOfRangeError
from roadquiz.stages.layout import Boss, ChapterLayout, Normal, Review


class ChapterLayoutTests(unittest.TestCase):
    def setUp(self) -> None:
        self.layout = ChapterLayout.uniform(5, 21)

    def test_totals(self) -> None:
        self.assertEqual(self.layout.total_chapters, 5)
        self.assertEqual(self.layout.total_stages, 105)

    def test_chapter_and_stage_in_chapter(self) -> None:
        self.assertEqual(self.layout.chapter_and_stage_in_chapter(1), (1, 1))
        self.assertEqual(self.layout.chapter_and_stage_in_chapter(21), (1, 21))
        self.assertEqual(self.layout.chapter_and_stage_in_chapter(22), (2, 1))
        self.assertEqual(self.layout.chapter_and_stage_in_chapter(105), (5, 21))

    def test_round_trip_all_stages(self) -> None:
        for layout in (self.layout, ChapterLayout([3, 7, 12, 30])):
            for stage in range(1, layout.total_stages + 1):
                chapter, in_chapter = layout.chapter_and_stage_in_chapter(stage)
                self.assertEqual(layout.global_stage(chapter, in_chapter), stage)

    def test_out_of_range(self) -> None:
        for stage in (0, -3, 106):
            with self.assertRaises(OutOfRangeError):
                self.layout.chapter_and_stage_in_chapter(stage)
        with self.assertRaises(OutOfRangeError):
            self.layout.stages_in_chapter(6)
        with self.assertRaises(OutOfRangeError):
            self.layout.global_stage(1, 22)

    def test_21_stage_chapter_types(self) -> None:
        self.assertEqual(self.layout.review_interval(1), 4)
        for n in range(1, 22):
            kind = self.layout.stage_type(n)
            if n == 21:
                self.assertEqual(kind, Boss())
            elif n in (5, 10, 15, 20):
                self.assertEqual(kind, Review())
            else:
                self.assertEqual(kind, Normal(n))
        # second chapter follows the same pattern on global numbers
        self.assertEqual(self.layout.stage_type(26), Review())
        self.assertEqual(self.layout.stage_type(42), Boss())
        self.assertEqual(self.layout.stage_type(43), Normal(1))

    def test_exactly_one_boss_per_chapter(self) -> None:
        layout = ChapterLayout([1, 2, 5, 10, 21, 30])
        for chapter in range(1, layout.total_chapters + 1):
            stages = list(layout.chapter_range(chapter))
            bosses = [s for s in stages if layout.is_boss(s)]
            self.assertEqual(bosses, [stages[-1]])

    def test_boss_wins_over_review_boundary(self) -> None:
        # size 5 -> interval 4 -> stage 5 would be review, but it is the last stage
        layout = ChapterLayout([5])
        self.assertEqual(layout.stage_type(5), Boss())
        self.assertFalse(any(layout.is_review(s) for s in range(1, 6)))

    def test_short_chapters_have_no_review(self) -> None:
        layout = ChapterLayout([4, 3])
        self.assertFalse(any(layout.is_review(s) for s in range(1, layout.total_stages + 1)))

    def test_large_chapter_interval(self) -> None:
        layout = ChapterLayout([30])
        self.assertEqual(layout.review_interval(1), 6)
        reviews = [s for s in range(1, 31) if layout.is_review(s)]
        self.assertEqual(reviews, [7, 14, 21, 28])

    def test_invalid_layout(self) -> None:
        with self.assertRaises(ValueError):
            ChapterLayout([])
        with self.assertRaises(ValueError):
            ChapterLayout([21, 0])

    def test_label(self) -> None:
        self.assertEqual(self.layout.label(21), "Chapter 1 - Final stage")
        self.assertEqual(self.layout.label(25), "Chapter 2 - Stage 4")


if __name__ == "__main__":
    unittest.main()
