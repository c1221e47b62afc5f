from __future__ import annotations

import math
import unittest

import numpy as np

from calcpal_graph.errors import CompileError
from calcpal_graph.expression import FUNCTIONS, compile_expression, normalize_expression, register_function


class NormalizeExpressionTests(unittest.TestCase):
    def test_caret_and_superscripts_become_power(self) -> None:
        self.assertEqual(normalize_expression("x²+x³"), "x^2+x^3")
        self.assertEqual(normalize_expression("x**2"), "x^2")
        self.assertEqual(normalize_expression("x¹⁰"), "x^10")

    def test_keypad_glyphs_are_rewritten(self) -> None:
        self.assertEqual(normalize_expression("2×x÷4"), "2*x/4")
        self.assertEqual(normalize_expression("sin(π×x)"), "sin(pi*x)")
        self.assertEqual(normalize_expression("x−1"), "x-1")


class CompileExpressionTests(unittest.TestCase):
    def test_power_of_x(self) -> None:
        self.assertEqual(compile_expression("x^2")(3.0), 9.0)
        self.assertEqual(compile_expression("x**2")(3.0), 9.0)
        self.assertEqual(compile_expression("x²")(3.0), 9.0)

    def test_precedence_and_associativity(self) -> None:
        self.assertEqual(compile_expression("1 + 2 * 3")(0.0), 7.0)
        self.assertEqual(compile_expression("(1 + 2) * 3")(0.0), 9.0)
        self.assertEqual(compile_expression("-x^2")(3.0), -9.0)
        self.assertEqual(compile_expression("2^3^2")(0.0), 512.0)
        self.assertEqual(compile_expression("2^-1")(0.0), 0.5)
        self.assertEqual(compile_expression("10 - 4 - 3")(0.0), 3.0)
        self.assertEqual(compile_expression("24 / 4 / 2")(0.0), 3.0)

    def test_scientific_literals_and_constants(self) -> None:
        self.assertEqual(compile_expression("1.5e2")(0.0), 150.0)
        self.assertEqual(compile_expression(".5")(0.0), 0.5)
        self.assertAlmostEqual(compile_expression("pi")(0.0), math.pi)
        self.assertAlmostEqual(compile_expression("log(e)")(0.0), 1.0)

    def test_named_functions_bind_to_numpy(self) -> None:
        self.assertAlmostEqual(compile_expression("sqrt(x)")(16.0), 4.0)
        self.assertAlmostEqual(compile_expression("abs(x)")(-2.5), 2.5)
        self.assertAlmostEqual(compile_expression("exp(x)")(1.0), math.e)
        self.assertAlmostEqual(compile_expression("cos(x)")(0.0), 1.0)
        self.assertAlmostEqual(compile_expression("log10(x)")(1000.0), 3.0)

    def test_division_by_zero_is_non_finite_not_an_exception(self) -> None:
        fn = compile_expression("1/x")
        self.assertTrue(math.isinf(fn(0.0)))
        sample = fn.sample(0.0)
        self.assertEqual(sample.status, "INVALID")
        self.assertIsNone(sample.y)
        self.assertFalse(sample.valid)

    def test_domain_errors_are_invalid_samples(self) -> None:
        fn = compile_expression("sqrt(x)")
        self.assertTrue(math.isnan(fn(-1.0)))
        self.assertEqual(fn.sample(-1.0).status, "INVALID")
        ok = fn.sample(4.0)
        self.assertEqual(ok.status, "OK")
        self.assertEqual(ok.y, 2.0)

    def test_vectorised_evaluation(self) -> None:
        fn = compile_expression("x^2")
        ys = fn.evaluate(np.asarray([1.0, 2.0, 3.0]))
        self.assertTrue(np.array_equal(ys, np.asarray([1.0, 4.0, 9.0])))
        constant = compile_expression("5").evaluate(np.zeros(4))
        self.assertEqual(constant.shape, (4,))

    def test_degree_mode_converts_input_before_evaluation(self) -> None:
        fn = compile_expression("sin(x)", degree_mode=True)
        self.assertAlmostEqual(fn(180.0), 0.0, places=9)
        self.assertAlmostEqual(fn(90.0), 1.0, places=9)
        # The whole body sees radians, not only trig arguments.
        self.assertAlmostEqual(compile_expression("x^2", degree_mode=True)(180.0), math.pi**2)

    def test_trig_scoped_degree_mode_leaves_other_terms_alone(self) -> None:
        self.assertEqual(compile_expression("x^2", degree_mode=True, degree_scope="trig")(180.0), 32400.0)
        self.assertAlmostEqual(compile_expression("sin(x)", degree_mode=True, degree_scope="trig")(90.0), 1.0)
        self.assertAlmostEqual(compile_expression("x + cos(x)", degree_mode=True, degree_scope="trig")(180.0), 179.0)

    def test_compilation_is_cached_per_angle_mode(self) -> None:
        self.assertIs(compile_expression("x + 1"), compile_expression("x + 1"))
        self.assertIsNot(compile_expression("x + 1"), compile_expression("x + 1", degree_mode=True))

    def test_syntax_errors_raise_compile_error(self) -> None:
        bad = ["", "   ", "(x+1", "x+1)", "foo(x)", "y", "x $ 2", "sin x", "2x", "x+", "()", "log(8, 2)"]
        for text in bad:
            with self.subTest(text=text):
                with self.assertRaises(CompileError):
                    compile_expression(text)

    def test_compile_error_reports_position_and_is_value_error(self) -> None:
        with self.assertRaises(ValueError) as ctx:
            compile_expression("x + $")
        err = ctx.exception
        self.assertIsInstance(err, CompileError)
        self.assertEqual(err.position, 4)
        self.assertEqual(err.expression, "x + $")

    def test_unbalanced_parenthesis_message(self) -> None:
        with self.assertRaisesRegex(CompileError, "unbalanced parenthesis"):
            compile_expression("sin(x")
        with self.assertRaisesRegex(CompileError, "unbalanced parenthesis"):
            compile_expression("x)")

    def test_unknown_identifier_message(self) -> None:
        with self.assertRaisesRegex(CompileError, "unknown identifier `alert`"):
            compile_expression("alert(1)")

    def test_long_flat_chains_compile_and_evaluate(self) -> None:
        fn = compile_expression("+".join(["x"] * 3000))
        self.assertEqual(fn(1.0), 3000.0)
        self.assertEqual(compile_expression("*".join(["x"] * 3000))(1.0), 1.0)

    def test_moderate_nesting_is_accepted(self) -> None:
        self.assertEqual(compile_expression("(" * 50 + "x" + ")" * 50)(2.0), 2.0)
        self.assertEqual(compile_expression("sin(" * 20 + "0" + ")" * 20)(5.0), 0.0)

    def test_deep_nesting_raises_compile_error(self) -> None:
        for text in ("(" * 2000 + "x" + ")" * 2000, "-" * 3000 + "x", "^".join(["x"] * 3000)):
            with self.assertRaisesRegex(CompileError, "nested too deeply"):
                compile_expression(text)

    def test_rejects_bad_degree_scope(self) -> None:
        with self.assertRaises(ValueError):
            compile_expression("x", degree_scope="gradians")  # type: ignore[arg-type]

    def test_register_function_extends_whitelist(self) -> None:
        register_function("double", lambda a: a * 2.0)
        try:
            self.assertEqual(compile_expression("double(x) + 1")(3.0), 7.0)
        finally:
            FUNCTIONS.pop("double", None)
        with self.assertRaises(ValueError):
            register_function("x", np.abs)
        with self.assertRaises(ValueError):
            register_function("not a name", np.abs)


if __name__ == "__main__":
    unittest.main()
