import os
from contextlib import contextmanager
from unittest.mock import patch

from civiltime import reset_local_timezone


class AlwaysEqual:
    def __eq__(self, _):
        return True


class NeverEqual:
    def __eq__(self, _):
        return False


class AlwaysLarger:
    def __lt__(self, _):
        return False

    def __le__(self, _):
        return False

    def __gt__(self, _):
        return True

    def __ge__(self, _):
        return True


class AlwaysSmaller:
    def __lt__(self, _):
        return True

    def __le__(self, _):
        return True

    def __gt__(self, _):
        return False

    def __ge__(self, _):
        return False


@contextmanager
def local_tz(name):
    try:
        with patch.dict(os.environ, {"TZ": name}):
            reset_local_timezone()
            yield
    finally:
        reset_local_timezone()  # don't forget to reset the timezone after the patch!
