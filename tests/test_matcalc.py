"""Tests for the matrix calculator."""

import json
import unittest

from blockcalc_pkg.api import render_json, run_script
from blockcalc_pkg.matcalc import MatrixValue, _MatrixBinary, _UnaryCommand, build_matrix_operations
from blockcalc_pkg.matrix import Matrix
from blockcalc_pkg.memory import VariableStore
from blockcalc_pkg.output import render_determinant
from blockcalc_pkg.types import NOT_APPLICABLE

EYE2 = "[   1.000    0.000]\n[   0.000    1.000]"
ZERO2 = "[   0.000    0.000]\n[   0.000    0.000]"


def run_matrix(script):
    return run_script(script, kind="matrix")


class TestMatrixLiterals(unittest.TestCase):
    def test_initial_result_is_zero_matrix(self):
        result = run_matrix("")
        self.assertEqual(result.outputs, [ZERO2])

    def test_identity(self):
        result = run_matrix("eye 2")
        self.assertEqual(result.outputs, [ZERO2, EYE2])

    def test_zero(self):
        result = run_matrix("eye 3\nzero 2")
        self.assertEqual(result.final, Matrix.zeros(2))

    def test_size_limit(self):
        result = run_matrix("eye 2\nzero 99999999999")
        self.assertEqual(result.final, Matrix.eye(2))
        self.assertTrue(any("exceeds the limit" in d for d in result.diagnostics))

    def test_bad_size(self):
        result = run_matrix("eye x")
        self.assertTrue(any("Invalid integer literal" in d for d in result.diagnostics))

    def test_mat_block(self):
        result = run_matrix("mat:\n\t1 2 3\n\t4 5 6\n")
        self.assertEqual(result.final.to_list(), [[1, 2, 3], [4, 5, 6]])

    def test_mat_needs_body(self):
        self.assertIs(MatrixValue().try_apply(["mat"], ["mat"], Matrix.eye(2)), NOT_APPLICABLE)
        result = run_matrix("mat")
        self.assertIn('Unknown command: "mat"', result.diagnostics)

    def test_ragged_literal_is_reported(self):
        result = run_matrix("mat:\n\t1 2\n\t3\n")
        self.assertEqual(result.final, Matrix.zeros(2))
        self.assertTrue(any(d.startswith("Error: Row 2") for d in result.diagnostics))


class TestMatrixArithmetic(unittest.TestCase):
    def test_add_literal_and_variable(self):
        result = run_matrix("mat:\n\t1 2\n\t3 4\n\nstore a\nadd a\nadd:\n\t1 1\n\t1 1\n")
        self.assertEqual(result.final.to_list(), [[3, 5], [7, 9]])

    def test_sub(self):
        result = run_matrix("eye 2\nsub:\n\t1 1\n\t1 1\n")
        self.assertEqual(result.final.to_list(), [[0, -1], [-1, 0]])

    def test_scalar_multiply(self):
        result = run_matrix("eye 2\nsmul 3\nsmul -0.5")
        self.assertEqual(result.final.to_list(), [[-1.5, 0], [0, -1.5]])

    def test_bad_scalar(self):
        result = run_matrix("eye 2\nsmul two")
        self.assertEqual(result.final, Matrix.eye(2))
        self.assertTrue(any("Invalid number" in d for d in result.diagnostics))

    def test_separate_scalar_tokens_are_not_merged(self):
        result = run_matrix("eye 2\nsmul 1 2")
        self.assertEqual(result.final, Matrix.eye(2))
        self.assertTrue(any("Invalid number: '1 2'" in d for d in result.diagnostics))

    def test_scalar_with_surrounding_spaces(self):
        result = run_matrix("eye 2\n  smul   2.5  ")
        self.assertEqual(result.final.to_list(), [[2.5, 0], [0, 2.5]])

    def test_mul(self):
        result = run_matrix("mat:\n\t1 2\n\t3 4\n\nmul:\n\t0 1\n\t1 0\n")
        self.assertEqual(result.final.to_list(), [[2, 1], [4, 3]])

    def test_mul_shape_mismatch_keeps_result(self):
        result = run_matrix("eye 2\nmul:\n\t1 2 3\n")
        self.assertEqual(result.final, Matrix.eye(2))
        self.assertTrue(any("Cannot multiply" in d for d in result.diagnostics))

    def test_div_by_variable(self):
        script = "mat:\n\t2 0\n\t0 4\n\nstore d\nmat:\n\t2 4\n\t6 8\n\ndiv d"
        result = run_matrix(script)
        self.assertTrue(result.final.allclose(Matrix.from_rows([[1, 1], [3, 2]])))

    def test_unknown_variable_operand(self):
        result = run_matrix("eye 2\nadd b")
        self.assertIn("Error: Unknown variable: b", result.diagnostics)
        self.assertEqual(result.final, Matrix.eye(2))


class TestMatrixCommands(unittest.TestCase):
    def test_inverse(self):
        result = run_matrix("mat:\n\t1 2\n\t3 4\n\ninv")
        self.assertTrue(result.final.allclose(Matrix.from_rows([[-2, 1], [1.5, -0.5]])))
        self.assertIn("det =   -2.000", result.transcript)

    def test_inverse_of_singular_matrix(self):
        result = run_matrix("zero 2\ninv")
        self.assertTrue(result.ok)
        self.assertEqual(result.final, Matrix.zeros(2))
        self.assertIn("Matrix is not regular; inverse does not exist", result.diagnostics)
        self.assertEqual(result.outputs[-1], ZERO2)

    def test_inverse_of_non_square_matrix(self):
        result = run_matrix("mat:\n\t1 2 3\n\ninv")
        self.assertEqual(result.final.shape, (1, 3))
        self.assertIn("Matrix is not regular; inverse does not exist", result.diagnostics)

    def test_inverse_zero_pivot(self):
        result = run_matrix("mat:\n\t0 1\n\t1 0\n\ninv")
        self.assertTrue(any("Zero pivot" in d for d in result.diagnostics))

    def test_triangular_factors(self):
        result = run_matrix("mat:\n\t4 3\n\t6 3\n\nstore a\numat\nstore u\nload a\nlmat")
        self.assertTrue(result.final.allclose(Matrix.from_rows([[1, 0], [1.5, 1]])))
        self.assertIn("u = \n [   4.000    3.000]\n [   0.000   -1.500]", run_matrix(
            "mat:\n\t4 3\n\t6 3\n\numat\nstore u\nshow"
        ).transcript)

    def test_eigenvalues(self):
        result = run_matrix("mat:\n\t2 1\n\t1 3\n\neigen")
        diagonal = sorted([result.final.vals[0, 0], result.final.vals[1, 1]])
        self.assertAlmostEqual(diagonal[0], (5 - 5 ** 0.5) / 2, places=9)
        self.assertAlmostEqual(diagonal[1], (5 + 5 ** 0.5) / 2, places=9)
        self.assertEqual(result.final.vals[0, 1], 0.0)

    def test_equation(self):
        result = run_matrix("mat:\n\t2 0 4\n\t0 2 6\n\nequation")
        self.assertTrue(result.final.allclose(Matrix.from_rows([[2], [3]])))

    def test_equation_singular(self):
        result = run_matrix("mat:\n\t1 2 3\n\t2 4 6\n\nequation")
        self.assertIn("Error: Coefficient matrix is singular", result.diagnostics)

    def test_equation_wrong_shape(self):
        result = run_matrix("eye 2\nequation")
        self.assertTrue(any("one more column than rows" in d for d in result.diagnostics))

    def test_determinant(self):
        result = run_matrix("mat:\n\t1 2\n\t3 4\n\ndet")
        self.assertEqual(result.final.to_list(), [[-2.0]])
        result = run_matrix("mat:\n\t1 2 3\n\ndet")
        self.assertTrue(any("square" in d for d in result.diagnostics))

    def test_show_variables(self):
        result = run_matrix("eye 2\nstore e\nshow")
        self.assertIn("e = \n " + EYE2.replace("\n", "\n "), result.transcript)

    def test_operation_order(self):
        names = [type(op).__name__ for op in build_matrix_operations()]
        self.assertEqual(names[0], "EmptyOperation")
        self.assertEqual(names[-2:], ["LoadStore", "ShowVariables"])


class TestOperationClasses(unittest.TestCase):
    def test_incomplete_command_cannot_be_built(self):
        class Trace(_UnaryCommand):
            keyword = "trace"

        with self.assertRaises(TypeError):
            Trace()

    def test_incomplete_binary_cannot_be_built(self):
        class Kron(_MatrixBinary):
            keyword = "kron"

        with self.assertRaises(TypeError):
            Kron(VariableStore())


class TestJsonRendering(unittest.TestCase):
    def test_every_output_line_is_json(self):
        result = run_script("eye 2\nstore a\ninv\nshow", kind="matrix", output_format="json")
        lines = [json.loads(line) for line in result.transcript.splitlines()]
        self.assertTrue(all(line["ok"] for line in lines))
        self.assertIn({"ok": True, "det": 1.0}, lines)
        self.assertIn({"ok": True, "variables": {"a": [[1.0, 0.0], [0.0, 1.0]]}}, lines)

    def test_not_regular_message_stays_off_the_output(self):
        result = run_script("zero 2\ninv", kind="matrix", output_format="json")
        for line in result.transcript.splitlines():
            json.loads(line)
        self.assertIn("Matrix is not regular; inverse does not exist", result.diagnostics)

    def test_memo_show(self):
        result = run_script("5\nstore x\nshow", kind="memo", output_format="json")
        lines = [json.loads(line) for line in result.transcript.splitlines()]
        self.assertEqual(lines[-2], {"ok": True, "variables": {"x": "5"}})

    def test_non_finite_entries(self):
        m = Matrix.from_rows([[float("nan"), float("inf")], [-float("inf"), 1.0]])
        data = json.loads(render_json(m))
        self.assertEqual(data["result"], [["nan", "inf"], ["-inf", 1.0]])
        self.assertEqual(json.loads(render_determinant(float("nan"), "json")), {"ok": True, "det": "nan"})

    def test_integer(self):
        self.assertEqual(json.loads(render_json(168)), {"ok": True, "result": "168"})

    def test_matrix(self):
        data = json.loads(render_json(Matrix.eye(2)))
        self.assertEqual(data["result"], [[1.0, 0.0], [0.0, 1.0]])


if __name__ == "__main__":
    unittest.main()
