# ==================================================================================================
#                                   Logging
# ==================================================================================================
#
# Tiny logging bootstrap used by the CLI entry point. Library modules only ask
# for `logging.getLogger(__name__)`; handler setup happens here exactly once.

import logging


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure global logging once.

    Parameters
    ----------
    level
        Logging level.

    Usage example
    -------------
        configure_logging(logging.DEBUG if verbose else logging.WARNING)
        logging.getLogger(__name__).info("hello")
    """
    # Repeated calls keep the first handler setup; we do not pass `force=True`
    # so embedding applications keep their own configuration.
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def level_for(verbose: bool) -> int:
    """Return the root logging level matching the `--verbose` flag."""
    return logging.DEBUG if verbose else logging.WARNING
