import unittest
from nutri_app.goal_selector import (
    HEALTH_GOAL_CATEGORIES,
    NONE_KEYWORD,
    GoalSelectionError,
    GoalSelectionMachine,
    filtered_categories,
    run_goal_selection,
)


class TestCategoryFilter(unittest.TestCase):
    def test_male_hides_womens_categories(self):
        categories = filtered_categories("male")
        self.assertNotIn("WOMENS_HEALTH", categories)
        self.assertNotIn("PREGNANCY", categories)
        self.assertIn("MENS_HEALTH", categories)

    def test_female_hides_mens_health(self):
        categories = filtered_categories("여성")
        self.assertNotIn("MENS_HEALTH", categories)
        self.assertIn("PREGNANCY", categories)

    def test_unknown_gender_sees_everything(self):
        self.assertEqual(len(filtered_categories(None)), 18)
        self.assertEqual(filtered_categories(None)[0], "ENERGY")


class TestGoalSelectionMachine(unittest.TestCase):
    def setUp(self):
        self.machine = GoalSelectionMachine("female")

    def test_cannot_proceed_without_selection(self):
        self.assertFalse(self.machine.can_proceed())
        self.machine.toggle("피로 회복")
        self.assertTrue(self.machine.can_proceed())

    def test_none_is_exclusive(self):
        self.machine.toggle("피로 회복")
        self.machine.toggle("활력 증진")
        self.assertEqual(self.machine.toggle(NONE_KEYWORD), [NONE_KEYWORD])
        self.assertEqual(self.machine.toggle("체력 유지"), ["체력 유지"])
        self.assertEqual(self.machine.toggle("체력 유지"), [])

    def test_keywords_offer_none(self):
        self.assertEqual(self.machine.keywords()[-1], NONE_KEYWORD)

    def test_selection_restored_when_going_back(self):
        self.machine.toggle("피로 회복")
        self.assertEqual(self.machine.next().category, "IMMUNITY")
        self.assertEqual(self.machine.selected, [])
        self.machine.toggle("감기 예방")

        result = self.machine.previous()
        self.assertEqual(result.category, "ENERGY")
        self.assertEqual(self.machine.selected, ["피로 회복"])

        self.machine.next()
        self.assertEqual(self.machine.selected, ["감기 예방"])

    def test_previous_on_first_category_exits(self):
        result = self.machine.previous()
        self.assertTrue(result.exited)
        self.assertIsNone(result.category)

    def test_walk_to_completion(self):
        steps = len(self.machine.categories)
        self.machine.toggle("피로 회복")
        for _ in range(steps - 1):
            self.assertFalse(self.machine.next().completed)
            if self.machine.current == "SLEEP":
                self.machine.toggle("숙면 유도")
            else:
                self.machine.select_none()
        self.assertAlmostEqual(self.machine.progress, 1.0)

        result = self.machine.next()
        self.assertTrue(result.completed)
        self.assertTrue(self.machine.completed)
        # 관심없음 in any category overrides the rest
        self.assertEqual(result.goals, [NONE_KEYWORD])

    def test_goals_deduplicated_in_category_order(self):
        self.machine.toggle("활력 증진")
        self.machine.next()
        self.machine.toggle("감기 예방")
        self.machine.toggle("항산화 케어")
        self.assertEqual(self.machine.collect_goals(), ["활력 증진", "감기 예방", "항산화 케어"])


class TestGoalSelectionRun(unittest.TestCase):
    def test_full_run_collects_goals(self):
        selections = {key: [NONE_KEYWORD] for key in filtered_categories("male")}
        selections["ENERGY"] = ["피로 회복", "활력 증진"]
        selections["SLEEP"] = ["숙면 유도", "존재하지 않는 키워드"]
        result = run_goal_selection("male", selections)
        self.assertTrue(result.completed)
        self.assertEqual(result.goals, [NONE_KEYWORD])

    def test_run_without_none_keeps_keywords(self):
        selections = {key: [HEALTH_GOAL_CATEGORIES[key]["keywords"][0]] for key in filtered_categories("female")}
        result = run_goal_selection("female", selections)
        self.assertEqual(len(result.goals), len(selections))
        self.assertEqual(result.goals[0], "피로 회복")

    def test_missing_category_reports_progress(self):
        selections = {"ENERGY": ["피로 회복"]}
        with self.assertRaises(GoalSelectionError) as ctx:
            run_goal_selection("female", selections)
        self.assertEqual(ctx.exception.category, "IMMUNITY")
        self.assertAlmostEqual(ctx.exception.progress, 2 / 17)


if __name__ == "__main__":
    unittest.main()
