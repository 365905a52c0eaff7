# fullGPy/config.py
import logging

__version__ = "0.1.0"


class _FullGPyConfig:
    def __init__(self):
        self.version = __version__
        # Random initial designs: max_points // init_points_divisor + 1 points
        # drawn uniformly in init_box, targets drawn from N(0, init_target_std^2)
        self.init_points_divisor = 10
        self.init_box = (-1.0, 1.0)
        self.init_target_std = 0.1
        # Predictive variances below -variance_tolerance are reported
        self.variance_tolerance = 1e-8
        self.logger = logging.getLogger("fullGPy")
        if not self.logger.handlers:
            h = logging.StreamHandler()
            h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
            self.logger.addHandler(h)
        self.logger.setLevel(logging.WARNING)

    def __repr__(self):
        return (
            f"<FullGPyConfig "
            f"version={self.version!r}, "
            f"init_points_divisor={self.init_points_divisor!r}, "
            f"init_box={self.init_box!r}, "
            f"init_target_std={self.init_target_std!r}, "
            f"variance_tolerance={self.variance_tolerance!r}>"
        )

    def update(self, **kwargs):
        for k, v in kwargs.items():
            if not hasattr(self, k):
                raise AttributeError(f"unknown configuration key '{k}'")
            setattr(self, k, v)
        return self


_config = _FullGPyConfig()


def get_config():
    return _config


def get_logger():
    return _config.logger


def set_log_level(level):
    _config.logger.setLevel(level)
