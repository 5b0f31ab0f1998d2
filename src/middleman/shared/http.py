import logging
from contextlib import contextmanager

from fastapi import HTTPException

from middleman.core.errors import ENCRYPTION_FAILED, CryptoError
from middleman.shared.logger import Logger

__all__ = ["seal_error_handler"]

logger = Logger(__name__, level=logging.DEBUG).get_logger()


@contextmanager
def seal_error_handler(path: str, stacklevel=1):
    """
    Turns a failure to seal a response into a plain 500.

    Without a working key there is nothing to protect the message with, so
    the caller gets a fixed unencrypted error and the detail stays in the log.
    """
    # Go 3 levels up to escape @contextmanager methods and current function
    stack_level = 2 + stacklevel
    kw = {"stacklevel": stack_level}
    try:
        yield

    except CryptoError as e:
        logger.critical(
            "Failed to encrypt response for %s: %s: %s", path, type(e).__name__, e, **kw
        )
        raise HTTPException(status_code=500, detail=ENCRYPTION_FAILED) from e
