import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from tools import MathTools


class MathToolsTestCase(unittest.TestCase):
    def test_to_number(self) -> None:
        self.assertEqual(MathTools.to_number(5), 5.0)
        self.assertEqual(MathTools.to_number("12.5"), 12.5)
        self.assertEqual(MathTools.to_number(" 7,5 "), 7.5)
        self.assertEqual(MathTools.to_number(None), 0.0)
        self.assertEqual(MathTools.to_number(""), 0.0)
        self.assertEqual(MathTools.to_number("abc"), 0.0)
        self.assertEqual(MathTools.to_number("nan"), 0.0)
        self.assertEqual(MathTools.to_number("inf"), 0.0)
        self.assertEqual(MathTools.to_number(True), 0.0)

    def test_parse(self) -> None:
        self.assertIsNone(MathTools.parse_float(""))
        self.assertEqual(MathTools.parse_float("2.25"), 2.25)
        self.assertEqual(MathTools.parse_int("8"), 8)
        self.assertEqual(MathTools.parse_int("8.9"), 8)
        self.assertIsNone(MathTools.parse_int("eight"))

    def test_set_volume(self) -> None:
        self.assertEqual(MathTools.set_volume(10, 5), 50.0)
        self.assertEqual(MathTools.set_volume("20", None), 0.0)

    def test_workout_volume(self) -> None:
        sessions = [
            {"sets": [{"weight": 10, "repetitions": 5}, {"weight": 0, "repetitions": 8}]},
            {"sets": [{"duration": 60}]},
            {"sets": [{"weight": "x", "repetitions": 3}, {"weight": "2.5", "repetitions": "4"}]},
            {"sets": None},
            {},
        ]
        self.assertEqual(MathTools.workout_volume(sessions), 60.0)
        self.assertEqual(MathTools.workout_volume([]), 0.0)


if __name__ == "__main__":
    unittest.main()
