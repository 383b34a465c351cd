import functools
import inspect
import logging
import sys
import time

from .config import get_log_config


## have flexibility to pass log level
class CustomLogger:

    def custlogger(self, loglevel=logging.DEBUG, name=None):
        # Set class name from where logger is called
        if name is None:
            stack = inspect.stack()
            the_class = stack[1][0].f_locals.get("self", None)
            name = the_class.__class__.__name__ if the_class else "RefHarmonizer"
            del stack

        config = get_log_config()

        # Create or get logger
        logger = logging.getLogger(name)
        logger.setLevel(loglevel)

        # Add handlers only if they are not already added
        if not logger.handlers:
            formatter = logging.Formatter(
                config["format"],
                datefmt=config["datefmt"],
            )

            stdout = logging.StreamHandler(stream=sys.stdout)
            stdout.setLevel(config["console_level"])
            stdout.setFormatter(formatter)
            logger.addHandler(stdout)

            if config["log_file"]:
                fh = logging.FileHandler(config["log_file"])
                fh.setLevel(config["file_level"])
                fh.setFormatter(formatter)
                logger.addHandler(fh)

        return logger


def timer_decorator(func):
    """Log the wall time of ``func`` at DEBUG level."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = CustomLogger().custlogger(name=func.__module__)
        t0 = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            logger.debug(f"[Timer] {func.__qualname__} took {time.perf_counter() - t0:.4f}s")

    return wrapper
