"""
Central estimator registry for win-probability estimators.
Use @register_estimator("name") above your estimator class to make it available to the CLI and scripts.
All estimator modules must be imported here to ensure registration occurs.
"""

ESTIMATOR_MAP = {}

def register_estimator(name):
	"""
	Decorator to register an estimator class under a given name.
	Usage:
		@register_estimator("exact")
		class ExactEstimator(WinProbabilityEstimator): ...
	"""
	def decorator(cls):
		ESTIMATOR_MAP[name] = cls
		return cls
	return decorator


def choose_estimator(name, config=None, rng=None):
	"""
	Return an estimator instance by name, built from a GameConfig (defaults if None).
	rng is only used by sampling estimators.
	Raises:
		ValueError: If the estimator name is unknown.
	"""
	key = name.lower()
	if key not in ESTIMATOR_MAP:
		raise ValueError(f"Unknown estimator: {name}. Supported: {sorted(ESTIMATOR_MAP)}")
	return ESTIMATOR_MAP[key].from_config(config, rng)

# Automatically import all estimator modules in this directory to ensure registration decorators run
import importlib
import os
import pkgutil

_this_dir = os.path.dirname(__file__)
_pkg_name = __name__
for _, modname, ispkg in pkgutil.iter_modules([_this_dir]):
	if not ispkg and modname not in ("__init__", "base"):
		importlib.import_module(f"{_pkg_name}.{modname}")
