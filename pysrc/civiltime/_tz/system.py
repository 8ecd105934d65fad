import platform
import time

SYSTEM = platform.system()

# Getting the name of the system timezone depends on the platform.
# On unix-like systems, the C library gives us the zone abbreviation
# (honoring the TZ environment variable).
# On other platforms, we use the tzlocal package.
# This keeps dependencies minimal for linux.
if SYSTEM in ("Linux", "Darwin"):  # pragma: no cover

    def _host_name() -> str:
        # pick up changes to the TZ environment variable
        time.tzset()
        return time.localtime().tm_zone

else:  # pragma: no cover
    import tzlocal

    def _host_name() -> str:
        return tzlocal.get_localzone_name()


def get_tz_name() -> str:
    """Get the name of the system timezone.

    Depending on the platform, this is an abbreviation (``EST``),
    a long name (``Eastern Standard Time``), or an IANA key
    (``America/New_York``).
    """
    return _host_name()
