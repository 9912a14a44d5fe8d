import logging
import pathlib
import time
import warnings

from secassess.core.config import settings

logger = logging.getLogger(__name__)

# Transient report files are always created with this prefix so the sweep never touches foreign files
TRANSIENT_PREFIX = "secassess-"


class CleanupWarning(UserWarning):
    """A transient file could not be removed. Logged and warned, never raised to the client."""


def remove_transient_file(path: pathlib.Path, request_id: str = "-") -> bool:
    """Unlink *path*, logging instead of raising on failure.

    Returns True when the file is gone afterwards (including when it never existed).
    """
    try:
        path.unlink()
        logger.info("[%s] Removed transient file: %s", request_id, path)
        return True
    except FileNotFoundError:
        logger.debug("[%s] Transient file already gone: %s", request_id, path)
        return True
    except OSError as e:
        message = f"Could not remove transient file {path}: {e}"
        logger.warning("[%s] %s", request_id, message)
        warnings.warn(message, CleanupWarning, stacklevel=2)
        return False


def sweep_stale_reports(tmp_dir: str | pathlib.Path | None = None) -> int:
    """Remove transient report files older than cleanup_ttl in tmp_dir.

    Catches files left behind by a crashed worker. Returns the number of files removed.
    """
    base = pathlib.Path(tmp_dir) if tmp_dir is not None else settings.report_tmp_dir
    removed = 0
    for item in base.glob(f"{TRANSIENT_PREFIX}*.pdf"):
        try:
            if time.time() - item.stat().st_mtime > settings.cleanup_ttl:
                logger.info(f"Attempting to remove stale report: {item}")
                item.unlink()
                removed += 1
        except FileNotFoundError:
            logger.warning(f"Item not found during cleanup (possibly already deleted): {item}")
        except OSError as e:
            logger.error(f"Error removing item {item}: {e}")
    return removed


if __name__ == "__main__":
    sweep_stale_reports()
