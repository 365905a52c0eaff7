import unittest
import numpy as np
from fullGPy import (GaussianProcess, newGP, Kernel, SquaredExponential, PointSet,
                     PreconditionError, NumericalError, negative_log_likelihood, get_config)


class ConstantKernel(Kernel):
    """Not positive semi-definite once the off-diagonal exceeds the diagonal"""

    def evaluate(self, x, y):
        return 1.0 if np.array_equal(x, y) else float(self.params[0])

    def gradient(self, x, y):
        return np.zeros(1) if np.array_equal(x, y) else np.ones(1)


class TestGaussianProcess(unittest.TestCase):

    def setUp(self):
        self.X = np.array([[0.0], [1.0], [2.0]])
        self.Z = np.array([0.0, 1.0, 0.0])
        self.noise = 0.01
        self.kernel = SquaredExponential(1.0)
        self.gp = GaussianProcess(self.kernel, self.noise, self.X, self.Z, max_points=10)

    def test_three_point_scenario(self):
        mean, var = self.gp.evaluate([1.0])
        self.assertAlmostEqual(mean, 1.0, delta=0.1)
        self.assertLess(var, 0.05)
        self.assertGreaterEqual(var, 0.0)

        mean, var = self.gp.evaluate([10.0])
        self.assertAlmostEqual(mean, 0.0, places=6)
        self.assertAlmostEqual(var, 1.0, places=6)

    def test_covariance_block(self):
        K = self.gp.covariance
        self.assertEqual(K.shape, (3, 3))
        np.testing.assert_array_equal(K, K.T)
        np.testing.assert_array_equal(np.diag(K), np.full(3, 1.0 + self.noise))
        self.assertEqual(self.gp._K.shape, (10, 10))

    def test_views_are_read_only(self):
        with self.assertRaises(ValueError):
            self.gp.targets[0] = 5.0
        with self.assertRaises(ValueError):
            self.gp.covariance[0, 0] = 5.0

    def test_regressed_coefficients(self):
        np.testing.assert_allclose(self.gp.covariance @ self.gp.regressed, self.Z, atol=1e-12)

    def test_training_point_recovery(self):
        X = np.linspace(-1, 1, 5).reshape(-1, 1)
        Z = np.array([0.3, -0.4, 0.8, 0.1, -0.6])
        gp = GaussianProcess(SquaredExponential(0.5), 1e-6, X, Z, max_points=5)
        for i in range(5):
            mean, var = gp.evaluate_training_point(i)
            self.assertAlmostEqual(mean, Z[i], delta=1e-3)
            self.assertLess(var, 1e-3)

    def test_training_point_matches_evaluate(self):
        for i in range(3):
            m1, v1 = self.gp.evaluate_training_point(i)
            m2, v2 = self.gp.evaluate(self.X[i])
            self.assertAlmostEqual(m1, m2, places=10)
            self.assertAlmostEqual(v1, v2, places=10)

    def test_training_point_out_of_range(self):
        with self.assertRaises(PreconditionError):
            self.gp.evaluate_training_point(3)
        with self.assertRaises(PreconditionError):
            self.gp.evaluate_training_point(-1)

    def test_variance_never_negative(self):
        rng = np.random.default_rng(1)
        X = rng.uniform(-1, 1, size=(20, 2))
        gp = GaussianProcess.from_points(SquaredExponential([0.4, 0.7]), 1e-4, X, 20, seed=1)
        for x in rng.uniform(-1.5, 1.5, size=(50, 2)):
            _, var = gp.evaluate(x)
            self.assertGreaterEqual(var, -1e-10)
        self.assertTrue(np.all(gp.predict(X)["s2"] >= -1e-10))

    def test_predict_matches_evaluate(self):
        Xref = np.array([[-0.5], [0.5], [1.5], [4.0]])
        result = self.gp.predict(Xref)
        for i, x in enumerate(Xref):
            mean, var = self.gp.evaluate(x)
            self.assertAlmostEqual(result["mean"][i], mean)
            self.assertAlmostEqual(result["s2"][i], var)

    def test_query_dimension_mismatch(self):
        with self.assertRaises(PreconditionError):
            self.gp.evaluate([1.0, 2.0])
        with self.assertRaises(PreconditionError):
            self.gp.predict(np.zeros((2, 3)))

    def test_log_likelihood(self):
        nll = negative_log_likelihood(self.kernel, list(self.X), self.Z, self.noise)
        self.assertAlmostEqual(self.gp.log_likelihood(), -nll)


class TestConstruction(unittest.TestCase):

    def setUp(self):
        self.kernel = SquaredExponential(0.5)

    def test_random_design(self):
        gp = GaussianProcess.random(self.kernel, 0.1, dimension=2, max_points=25, seed=0)
        self.assertEqual(gp.n, 25 // 10 + 1)
        self.assertEqual(gp.m, 2)
        X = gp.points.as_array()
        self.assertTrue(np.all(X >= -1.0) and np.all(X <= 1.0))
        self.assertEqual(gp.targets.shape, (3,))

    def test_random_design_follows_config(self):
        config = get_config()
        saved = (config.init_points_divisor, config.init_box)
        try:
            config.update(init_points_divisor=5, init_box=(0.0, 0.5))
            gp = GaussianProcess.random(self.kernel, 0.1, dimension=1, max_points=20, seed=4)
        finally:
            config.update(init_points_divisor=saved[0], init_box=saved[1])
        self.assertEqual(gp.n, 5)
        X = gp.points.as_array()
        self.assertTrue(np.all(X >= 0.0) and np.all(X <= 0.5))
        with self.assertRaises(AttributeError):
            config.update(no_such_key=1)

    def test_random_design_single_point(self):
        gp = GaussianProcess.random(self.kernel, 0.1, dimension=1, max_points=1)
        self.assertEqual(gp.n, 1)

    def test_random_preconditions(self):
        with self.assertRaises(PreconditionError):
            GaussianProcess.random(self.kernel, 0.0, 1, 10)
        with self.assertRaises(PreconditionError):
            GaussianProcess.random(self.kernel, -1.0, 1, 10)
        with self.assertRaises(PreconditionError):
            GaussianProcess.random(self.kernel, 0.1, 1, 0)
        with self.assertRaises(PreconditionError):
            GaussianProcess.random(self.kernel, 0.1, 0, 10)
        with self.assertRaises(PreconditionError):
            GaussianProcess.random(None, 0.1, 1, 10)

    def test_from_points_random_targets(self):
        X = np.linspace(-1, 1, 4)
        gp = GaussianProcess.from_points(self.kernel, 0.1, X, max_points=4, seed=2)
        self.assertEqual(gp.n, 4)
        self.assertEqual(gp.targets.shape, (4,))

    def test_capacity_boundary(self):
        X = np.linspace(-1, 1, 4)
        GaussianProcess(self.kernel, 0.1, X, np.zeros(4), max_points=4)
        with self.assertRaises(PreconditionError):
            GaussianProcess(self.kernel, 0.1, X, np.zeros(4), max_points=3)
        with self.assertRaises(PreconditionError):
            GaussianProcess.from_points(self.kernel, 0.1, X, max_points=3)

    def test_target_mismatch(self):
        with self.assertRaises(PreconditionError):
            GaussianProcess(self.kernel, 0.1, np.linspace(-1, 1, 4), np.zeros(3), max_points=5)

    def test_empty_training_set(self):
        gp = GaussianProcess(self.kernel, 0.1, PointSet(2), np.zeros(0), max_points=5)
        mean, var = gp.evaluate([0.0, 0.0])
        self.assertEqual(mean, 0.0)
        self.assertEqual(var, 1.0)

    def test_non_positive_definite_kernel(self):
        kernel = ConstantKernel(2.0)
        with self.assertRaises(NumericalError) as ctx:
            GaussianProcess(kernel, 0.01, np.array([0.0, 1.0]), np.zeros(2), max_points=2)
        self.assertNotIsInstance(ctx.exception, PreconditionError)

    def test_newGP_dispatch(self):
        gp = newGP(self.kernel, 0.1, dimension=3, max_points=30, seed=0)
        self.assertEqual((gp.n, gp.m), (4, 3))

        X = np.linspace(-1, 1, 5)
        gp = newGP(self.kernel, 0.1, points=X)
        self.assertEqual((gp.n, gp.max_points), (5, 5))

        Z = np.sin(X)
        gp = newGP(self.kernel, 0.1, points=X, targets=Z, max_points=8)
        np.testing.assert_array_equal(gp.targets, Z)

        with self.assertRaises(PreconditionError):
            newGP(self.kernel, 0.1, targets=Z, dimension=1, max_points=5)


class TestSharedPoints(unittest.TestCase):

    def setUp(self):
        self.points = PointSet(1, np.array([[0.0], [1.0]]))
        self.kernel = SquaredExponential(1.0)
        self.gp = GaussianProcess(self.kernel, 1e-4, self.points, [0.0, 1.0], max_points=5)

    def test_point_set_is_shared(self):
        self.assertIs(self.gp.points, self.points)

    def test_add(self):
        self.gp.add([2.0], 0.5)
        self.assertEqual(len(self.points), 3)
        self.assertEqual(self.gp.n, 3)
        mean, _ = self.gp.evaluate_training_point(2)
        self.assertAlmostEqual(mean, 0.5, delta=0.01)

    def test_add_beyond_capacity(self):
        for x in (2.0, 3.0, 4.0):
            self.gp.add([x], 0.0)
        with self.assertRaises(PreconditionError):
            self.gp.add([5.0], 0.0)
        self.assertEqual(len(self.points), 5)

    def test_external_append_requires_refresh(self):
        self.points.append([2.0])
        # caches still describe the first two points
        self.assertEqual(self.gp.n, 2)
        with self.assertRaises(PreconditionError):
            self.gp.refresh()
        with self.assertRaises(PreconditionError):
            self.gp.learn_hyperparams()
        with self.assertRaises(PreconditionError):
            self.gp.add([3.0], 0.0)

        self.gp.refresh(targets=[0.0, 1.0, 0.5])
        self.assertEqual(self.gp.n, 3)
        self.assertEqual(self.gp.covariance.shape, (3, 3))

    def test_refresh_after_kernel_change(self):
        before = self.gp.covariance[0, 1]
        self.kernel.params = [0.5]
        self.gp.refresh()
        after = self.gp.covariance[0, 1]
        self.assertLess(after, before)
        self.assertAlmostEqual(after, np.exp(-0.5 / 0.25))


if __name__ == '__main__':
    unittest.main()
