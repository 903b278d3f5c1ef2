import json
import os
import time

from ledger.common.exceptions import MalformedRecordError, StorageError
from ledger.logger_config import logger
from ledger.repositories.base import LedgerRepository, validate_snapshot
from ledger.schemas.reference import LedgerSnapshot


WRITE_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 0.1


class JsonFileRepository(LedgerRepository):
    """
    The whole ledger in one JSON document.

    Saves go to `<path>.tmp` first and then replace the target file, so a
    reader never sees a half-written snapshot. Concurrent writers are
    last-write-wins.
    """

    def __init__(self, path: str):
        self.path = path

    def load_all(self) -> LedgerSnapshot:
        if not os.path.exists(self.path):
            logger.info(f"No ledger file at {self.path}, starting empty")
            return LedgerSnapshot()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedRecordError(f"Ledger file {self.path} is not valid JSON: {e}") from e
        except OSError as e:
            raise StorageError(f"Could not read ledger file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise MalformedRecordError(f"Ledger file {self.path} does not hold an object")
        return validate_snapshot(data)

    def save_all(self, snapshot: LedgerSnapshot) -> None:
        snapshot.last_updated = int(time.time() * 1000)
        payload = snapshot.model_dump_json(by_alias=True, indent=2)

        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = self.path + ".tmp"

        last_error = None
        for attempt in range(1, WRITE_ATTEMPTS + 1):
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_path, self.path)
                logger.debug(f"Saved {len(snapshot.transactions)} transaction(s) to {self.path}")
                return
            except OSError as e:
                last_error = e
                logger.warning(f"Write attempt {attempt} to {self.path} failed: {e}")
                if os.path.exists(tmp_path):
                    try:
                        os.remove(tmp_path)
                    except OSError:
                        pass
                time.sleep(RETRY_DELAY_SECONDS)

        logger.error(f"Giving up writing {self.path} after {WRITE_ATTEMPTS} attempts")
        raise StorageError(f"Failed to write ledger file {self.path}: {last_error}")
