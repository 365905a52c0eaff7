import numpy as np
import fullGPy

# Generate example data
rng = np.random.default_rng(42)
X = rng.uniform(-1, 1, size=(30, 2))
Z = np.sin(3 * X[:, 0]) + np.cos(2 * X[:, 1]) + 0.05 * rng.normal(size=30)
X_test = rng.uniform(-1, 1, size=(5, 2))

# Build the GP on a shared point set with room for more observations
points = fullGPy.PointSet.from_array(X)
kernel = fullGPy.SquaredExponential([1.0, 1.0])
gp = fullGPy.newGP(kernel, noise=0.01, points=points, targets=Z, max_points=50)

fullGPy.set_log_level("INFO")
ok = gp.learn_hyperparams()
print("Learning usable:", ok)
print("Learned length scales:", kernel.params)

results = gp.predict(X_test)
print("Predictions mean:", results["mean"])
print("Predictions variance:", results["s2"])

# Add an observation and predict there
x_new = np.array([0.2, -0.3])
gp.add(x_new, np.sin(0.6) + np.cos(-0.6))
print("Mean/variance at new point:", gp.evaluate(x_new))
